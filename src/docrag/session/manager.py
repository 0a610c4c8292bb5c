"""Registry of live sessions, keyed by opaque id."""

from __future__ import annotations

import logging
from uuid import uuid4

from docrag.errors import SessionNotFoundError
from docrag.generation.llm import GenerationClient, get_generation_client
from docrag.ingestion.embedder import EmbeddingClient, get_embedding_client
from docrag.session.session import RagSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Creates and tracks :class:`RagSession` objects.

    Sessions share only the (stateless) model clients; chunks, embeddings
    and transcripts stay private to each session.  Clients default to the
    globally configured ones and are built on first use, so importing the
    app does not load a model.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient | None = None,
        generation_client: GenerationClient | None = None,
    ) -> None:
        self._embedding_client = embedding_client
        self._generation_client = generation_client
        self._sessions: dict[str, RagSession] = {}

    @property
    def embedding_client(self) -> EmbeddingClient:
        if self._embedding_client is None:
            self._embedding_client = get_embedding_client()
        return self._embedding_client

    @property
    def generation_client(self) -> GenerationClient:
        if self._generation_client is None:
            self._generation_client = get_generation_client()
        return self._generation_client

    def create(self) -> tuple[str, RagSession]:
        session_id = uuid4().hex
        session = RagSession(self.embedding_client, self.generation_client)
        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session_id, session

    def get(self, session_id: str) -> RagSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session {session_id!r} not found") from None

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(f"Session {session_id!r} not found")
        logger.info("Deleted session %s", session_id)

    def __len__(self) -> int:
        return len(self._sessions)
