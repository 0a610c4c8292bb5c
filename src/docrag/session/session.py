"""Retrieval session — ingestion and question answering over one document.

Concurrency contract
--------------------
* All work runs on one event loop and suspends only at embedding and
  generation calls.
* Last upload wins.  Every :meth:`RagSession.ingest` call takes a new
  generation token; a run whose token is stale when it resumes discards
  its results and raises :class:`IngestionSupersededError`.
* Queries are never queued.  :meth:`RagSession.ask` rejects a question
  unless the session is ``ready`` and no other question is outstanding.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from docrag.config import settings
from docrag.errors import (
    DocRagError,
    EmbeddingServiceError,
    GenerationServiceError,
    IngestionSupersededError,
    SessionBusyError,
    SessionNotReadyError,
)
from docrag.generation.llm import GenerationClient
from docrag.generation.prompts import assemble_prompt
from docrag.ingestion.chunker import chunk_document
from docrag.ingestion.embedder import EmbeddingClient, ProgressCallback
from docrag.ingestion.loader import SourceDocument
from docrag.retrieval.base import VectorStoreBase
from docrag.retrieval.memory_store import InMemoryVectorStore
from docrag.retrieval.models import RetrievalResult
from docrag.retrieval.retriever import SemanticRetriever
from docrag.session.state import ChatMessage, SessionState, SessionStatus

logger = logging.getLogger(__name__)

INITIAL_STATUS_TEXT = "Please upload a .txt file to begin."


class RagSession:
    """A private, in-memory RAG conversation over one uploaded document.

    Parameters
    ----------
    embedding_client:
        Embeds chunks during ingestion and questions during queries.
    generation_client:
        Answers the assembled prompts.
    top_k:
        Chunks placed in each prompt (defaults to ``settings.top_k``).
    min_chunk_chars:
        Shortest paragraph kept by the chunker (defaults to
        ``settings.min_chunk_chars``).
    store_factory:
        Builds the empty vector index each ingestion fills.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        generation_client: GenerationClient,
        *,
        top_k: int | None = None,
        min_chunk_chars: int | None = None,
        store_factory: Callable[[], VectorStoreBase] = InMemoryVectorStore,
    ) -> None:
        self._embedder = embedding_client
        self._generator = generation_client
        self.top_k = settings.top_k if top_k is None else top_k
        self.min_chunk_chars = settings.min_chunk_chars if min_chunk_chars is None else min_chunk_chars
        self._store_factory = store_factory

        self._state: SessionState | None = None
        self._generation = 0
        self._status = SessionStatus.EMPTY
        self._query_in_flight = False
        self._messages: list[ChatMessage] = []
        self.status_text = INITIAL_STATUS_TEXT
        self.last_sources: list[RetrievalResult] = []

    # -- views ----------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        if self._status is SessionStatus.READY and self._query_in_flight:
            return SessionStatus.QUERYING
        return self._status

    @property
    def state(self) -> SessionState | None:
        return self._state

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def document_name(self) -> str | None:
        return self._state.document_name if self._state else None

    @property
    def chunk_count(self) -> int:
        return self._state.chunk_count if self._state else 0

    # -- ingestion ------------------------------------------------------------

    async def ingest(
        self,
        document: SourceDocument,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> SessionState:
        """Chunk, embed and index *document*, replacing the current one.

        The previous document stays queryable-by-snapshot until the new
        index is complete; the swap is a single assignment.  On failure the
        previous document is kept (status ``ready``), or the session moves
        to ``failed`` when there was none.

        Raises
        ------
        EmptyDocumentError
            No paragraph is long enough to index.
        EmbeddingServiceError
            A chunk could not be embedded; nothing is committed.
        IngestionSupersededError
            A newer upload started while this one was embedding.
        """
        self._generation += 1
        token = self._generation
        previous = self._state
        self._status = SessionStatus.INGESTING
        self.status_text = f'Processing "{document.name}"...'
        logger.info("Ingesting %r (generation %d)", document.name, token)

        def _progress(done: int, total: int) -> None:
            if token != self._generation:
                return
            self.status_text = f"Generated embedding for chunk {done}/{total}..."
            if on_progress is not None:
                on_progress(done, total)

        try:
            chunks = chunk_document(document.text, self.min_chunk_chars)
            self.status_text = f"Chunked file into {len(chunks)} parts. Generating embeddings..."
            embeddings = await self._embedder.embed_batch(
                [chunk.text for chunk in chunks], on_progress=_progress
            )
        except (Exception, asyncio.CancelledError) as exc:
            if token != self._generation:
                if isinstance(exc, DocRagError):
                    raise self._superseded(document.name, token) from exc
                raise
            self._restore_after_failure(previous, exc)
            raise

        if token != self._generation:
            raise self._superseded(document.name, token)

        store = self._store_factory()
        for chunk, embedding in zip(chunks, embeddings, strict=True):
            store.add(chunk, embedding)

        state = SessionState(document_name=document.name, index=store, generation=token)
        self._state = state
        self._status = SessionStatus.READY
        self.status_text = f'Ready to chat with "{document.name}".'
        self._messages = [
            ChatMessage(
                role="model",
                text=f'I\'ve finished reading "{document.name}". What would you like to know?',
            )
        ]
        self.last_sources = []
        logger.info("Indexed %d chunks from %r", len(store), document.name)
        return state

    def _superseded(self, name: str, token: int) -> IngestionSupersededError:
        logger.info("Discarding superseded ingestion of %r (generation %d)", name, token)
        return IngestionSupersededError(f'Upload of "{name}" was superseded by a newer upload.')

    def _restore_after_failure(self, previous: SessionState | None, exc: BaseException) -> None:
        reason = exc.message if isinstance(exc, DocRagError) else (str(exc) or type(exc).__name__)
        logger.warning("Ingestion failed: %s", reason)
        if previous is None:
            self._status = SessionStatus.FAILED
            self.status_text = f"Error processing file: {reason}"
        else:
            self._status = SessionStatus.READY
            self.status_text = (
                f'Error processing file: {reason}. Still using "{previous.document_name}".'
            )

    # -- querying -------------------------------------------------------------

    async def ask(self, question: str, *, k: int | None = None) -> ChatMessage:
        """Answer *question* from the current document.

        Service failures do not raise: they come back as a model message
        with ``is_error=True``, and the session stays ``ready``.

        Raises
        ------
        ValueError
            *question* is blank.
        SessionBusyError
            Another question is still being answered.
        SessionNotReadyError
            No document has been ingested, or an upload is in progress.
        """
        if not question.strip():
            raise ValueError("Question must not be empty")
        if self._query_in_flight:
            raise SessionBusyError("A question is already being answered; wait for it to finish.")
        state = self._state
        if self._status is not SessionStatus.READY or state is None:
            raise SessionNotReadyError(f"Session is {self._status.value}; upload a document first.")

        self._query_in_flight = True
        self._messages.append(ChatMessage(role="user", text=question))
        sources: list[RetrievalResult] = []
        try:
            retriever = SemanticRetriever(state.index, self._embedder, default_k=self.top_k)
            sources = await retriever.search(question, k=k)
            logger.debug("Answering from %s", ", ".join(r.short_ref() for r in sources) or "no context")
            prompt = assemble_prompt([r.content for r in sources], question)
            answer = await self._generator.generate(prompt)
            reply = ChatMessage(role="model", text=answer)
        except (EmbeddingServiceError, GenerationServiceError) as exc:
            logger.warning("Query failed: %s", exc.message)
            sources = []
            reply = ChatMessage(
                role="model",
                text=f"Sorry, I encountered an error: {exc.message}",
                is_error=True,
            )
        finally:
            self._query_in_flight = False

        if self._state is state:
            self._messages.append(reply)
            self.last_sources = sources
        else:
            logger.info("Document replaced during query; answer not added to transcript")
        return reply
