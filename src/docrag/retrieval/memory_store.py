"""In-memory implementation of the vector-index abstraction."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from docrag.retrieval.base import VectorStoreBase
from docrag.retrieval.models import Chunk, Embedding, RankedResult

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*.

    Returns ``0.0`` instead of raising when the vectors differ in length or
    either one has zero norm, so one malformed vector cannot break ranking.
    """
    if len(a) != len(b):
        return 0.0
    # hypot scales internally, so neither tiny nor huge components under/overflow.
    norm_a = math.hypot(*a)
    norm_b = math.hypot(*b)
    if norm_a == 0.0 or norm_b == 0.0 or not math.isfinite(norm_a) or not math.isfinite(norm_b):
        return 0.0
    score = sum((x / norm_a) * (y / norm_b) for x, y in zip(a, b))
    if not math.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))


class InMemoryVectorStore(VectorStoreBase):
    """Brute-force cosine index over a single document's chunks."""

    def __init__(self) -> None:
        self._chunks: list[Chunk] = []
        self._embeddings: list[Embedding] = []

    # -- VectorStoreBase overrides --------------------------------------------

    def add(self, chunk: Chunk, embedding: Embedding) -> None:
        if chunk.index != len(self._chunks):
            raise ValueError(
                f"Chunk {chunk.index} added out of order; expected index {len(self._chunks)}"
            )
        if not embedding:
            raise ValueError(f"Chunk {chunk.index} has an empty embedding")
        if self._embeddings and len(embedding) != len(self._embeddings[0]):
            raise ValueError(
                f"Chunk {chunk.index} embedding has dimension {len(embedding)}, "
                f"index holds dimension {len(self._embeddings[0])}"
            )
        self._chunks.append(chunk)
        self._embeddings.append(list(embedding))

    def similarity_search(self, query_embedding: Embedding, *, k: int) -> list[RankedResult]:
        if k <= 0 or not self._embeddings:
            return []
        if len(query_embedding) != len(self._embeddings[0]):
            logger.warning(
                "Query embedding dimension %d does not match index dimension %d",
                len(query_embedding),
                len(self._embeddings[0]),
            )

        scores = [cosine_similarity(query_embedding, emb) for emb in self._embeddings]
        ranked = sorted(range(len(scores)), key=lambda i: (-scores[i], i))
        return [RankedResult(chunk_index=i, score=scores[i]) for i in ranked[:k]]

    def get(self, chunk_index: int) -> Chunk:
        if not 0 <= chunk_index < len(self._chunks):
            raise IndexError(f"No chunk with index {chunk_index}")
        return self._chunks[chunk_index]

    def chunks(self) -> list[Chunk]:
        return list(self._chunks)

    def clear(self) -> None:
        self._chunks.clear()
        self._embeddings.clear()

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def dimension(self) -> int | None:
        return len(self._embeddings[0]) if self._embeddings else None
