"""Domain models for chunks and ranked retrieval results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

Embedding = list[float]


class Chunk(BaseModel):
    """A paragraph of the source document — the unit of retrieval.

    Attributes
    ----------
    index:
        Zero-based position of the chunk within its document.  Indices are
        contiguous, so the index is also the chunk's position in the
        vector index.
    text:
        The trimmed paragraph text.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    text: str


class RankedResult(BaseModel):
    """Similarity score of one stored chunk against a query embedding."""

    model_config = ConfigDict(frozen=True)

    chunk_index: int = Field(ge=0)
    score: float


class RetrievalResult(BaseModel):
    """A retrieved chunk together with the score that ranked it."""

    chunk: Chunk
    score: float

    @property
    def content(self) -> str:
        return self.chunk.text

    def short_ref(self) -> str:
        """Return a compact ``[§index score]`` reference string."""
        return f"[§{self.chunk.index} {self.score:.3f}]"

    def __str__(self) -> str:  # noqa: D105
        return f"{self.short_ref()} {self.content[:120]}…"
