"""Abstract base class for vector-index backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing the abstract methods.  The retriever and session layer
are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docrag.retrieval.models import Chunk, Embedding, RankedResult


class VectorStoreBase(ABC):
    """Backend-agnostic vector-index interface.

    Stores chunks alongside their embeddings.  Chunks must be added in
    document order so that a chunk's index is also its storage position.
    """

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def add(self, chunk: Chunk, embedding: Embedding) -> None:
        """Store *chunk* with its *embedding*.

        Raises
        ------
        ValueError
            The chunk is out of order or the embedding dimension does not
            match the vectors already stored.
        """
        ...

    @abstractmethod
    def similarity_search(self, query_embedding: Embedding, *, k: int) -> list[RankedResult]:
        """Return the top-*k* stored chunks for *query_embedding*.

        Results are sorted by descending score; equal scores keep the lower
        chunk index first.  The result holds ``min(k, len(self))`` entries.
        """
        ...

    @abstractmethod
    def get(self, chunk_index: int) -> Chunk:
        """Return the stored chunk with *chunk_index*."""
        ...

    @abstractmethod
    def chunks(self) -> list[Chunk]:
        """Return every stored chunk in index order."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored chunk and embedding."""
        ...

    @abstractmethod
    def __len__(self) -> int: ...

    # -- optional overrides ---------------------------------------------------

    @property
    def dimension(self) -> int | None:
        """Embedding length shared by stored vectors, or ``None`` when empty."""
        return None
