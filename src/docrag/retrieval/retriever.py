"""Semantic retriever — top-k chunk selection over a vector index.

Usage::

    from docrag.retrieval.retriever import SemanticRetriever

    retriever = SemanticRetriever(store, embedding_client)
    results   = await retriever.search("What does chapter two say about cats?")
    for r in results:
        print(r.short_ref(), r.content[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docrag.config import settings
from docrag.retrieval.base import VectorStoreBase
from docrag.retrieval.models import Chunk, Embedding, RetrievalResult

if TYPE_CHECKING:
    from docrag.ingestion.embedder import EmbeddingClient

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3


def retrieve(index: VectorStoreBase, query_embedding: Embedding, k: int = DEFAULT_TOP_K) -> list[Chunk]:
    """Return the *k* chunks of *index* most similar to *query_embedding*.

    An empty index yields an empty list: "no context available", not an
    error.
    """
    return [index.get(hit.chunk_index) for hit in index.similarity_search(query_embedding, k=k)]


class SemanticRetriever:
    """High-level retriever over a :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        The vector index to search.  It is only ever read.
    embedding_client:
        Used by :meth:`search` to embed query text.
    default_k:
        Default number of results (``settings.top_k`` when omitted).
    score_threshold:
        Minimum similarity score; results below this are discarded.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedding_client: EmbeddingClient | None = None,
        *,
        default_k: int | None = None,
        score_threshold: float | None = None,
    ) -> None:
        self._store = store
        self._embedding_client = embedding_client
        self.default_k = settings.top_k if default_k is None else default_k
        self.score_threshold = score_threshold

    # -- public API -----------------------------------------------------------

    async def search(self, query: str, *, k: int | None = None) -> list[RetrievalResult]:
        """Embed *query* and return the top-*k* chunks with their scores.

        Raises
        ------
        EmbeddingServiceError
            The query could not be embedded.
        """
        if self._embedding_client is None:
            raise RuntimeError("SemanticRetriever.search needs an embedding client")
        embedding = await self._embedding_client.embed(query)
        return self.search_by_embedding(embedding, k=k)

    def search_by_embedding(self, embedding: Embedding, *, k: int | None = None) -> list[RetrievalResult]:
        """Same as :meth:`search` but accepts a pre-computed embedding."""
        k = self.default_k if k is None else k
        results: list[RetrievalResult] = []
        for hit in self._store.similarity_search(embedding, k=k):
            if self.score_threshold is not None and hit.score < self.score_threshold:
                continue
            results.append(RetrievalResult(chunk=self._store.get(hit.chunk_index), score=hit.score))
        logger.debug("Retrieved %d of %d chunks (k=%d)", len(results), len(self._store), k)
        return results
