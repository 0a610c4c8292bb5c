"""Session state definitions.

A :class:`SessionState` is an immutable snapshot of one successfully
ingested document.  The session swaps snapshots in a single assignment,
so a query only ever sees one whole document, never a mix of old and new
chunks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pydantic import BaseModel

from docrag.retrieval.base import VectorStoreBase
from docrag.retrieval.models import Chunk


class SessionStatus(str, Enum):
    """Lifecycle of a retrieval session.

    ``empty → ingesting → ready ⇄ querying``; ``ingesting → failed`` when
    the first upload fails.  A new upload restarts ``ingesting`` from any
    state.
    """

    EMPTY = "empty"
    INGESTING = "ingesting"
    READY = "ready"
    QUERYING = "querying"
    FAILED = "failed"


class ChatMessage(BaseModel):
    """One entry of the session transcript shown to the user.

    Attributes
    ----------
    role:
        ``"user"`` or ``"model"``.
    text:
        Message body.
    image:
        Optional image attached to the message, as a ``data:`` URL.
    is_error:
        ``True`` when the model message reports a failed query.
    """

    role: Literal["user", "model"]
    text: str
    image: str | None = None
    is_error: bool = False


@dataclass(frozen=True)
class SessionState:
    """Chunks and embeddings of the document a session is answering from.

    Attributes
    ----------
    document_name:
        Display name of the uploaded file.
    index:
        Vector index holding every chunk with its embedding.  Written once
        during ingestion, read-only afterwards.
    generation:
        Ingestion token that produced this snapshot.
    """

    document_name: str
    index: VectorStoreBase
    generation: int

    @property
    def chunks(self) -> list[Chunk]:
        return self.index.chunks()

    @property
    def chunk_count(self) -> int:
        return len(self.index)
