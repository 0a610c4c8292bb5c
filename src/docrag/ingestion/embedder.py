"""Embedding client boundary.

The rest of the package only ever sees :class:`EmbeddingClient`.  Provider
responses are validated once, here, by :func:`coerce_embedding`; nothing
unchecked reaches the vector index.
"""

from __future__ import annotations

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from numbers import Real
from typing import TYPE_CHECKING, Any

from docrag.config import settings
from docrag.errors import EmbeddingServiceError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def coerce_embedding(raw: Any) -> list[float]:
    """Turn a provider response into a plain ``list[float]``.

    Accepts a bare sequence of numbers, or the ``{"values": [...]}`` /
    ``{"embedding": {"values": [...]}}`` shapes some providers return.

    Raises
    ------
    EmbeddingServiceError
        The response is not a non-empty sequence of finite numbers.
    """
    if isinstance(raw, dict):
        if "embedding" in raw:
            raw = raw["embedding"]
        if isinstance(raw, dict) and "values" in raw:
            raw = raw["values"]
    elif hasattr(raw, "values") and not callable(raw.values):
        raw = raw.values

    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise EmbeddingServiceError(
            f"Could not extract embedding values from response of type {type(raw).__name__}."
        )
    if not raw:
        raise EmbeddingServiceError("Embedding service returned an empty vector.")

    vector: list[float] = []
    for value in raw:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise EmbeddingServiceError(f"Embedding contains a non-numeric value: {value!r}")
        number = float(value)
        if not math.isfinite(number):
            raise EmbeddingServiceError("Embedding contains a non-finite value.")
        vector.append(number)
    return vector


class EmbeddingClient(ABC):
    """Maps a text unit to a fixed-length vector.

    Implementations must raise :class:`EmbeddingServiceError` on any
    transport, quota or shape failure.  No retries happen at this layer.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Return the embedding for *text*."""
        ...

    async def embed_batch(
        self,
        texts: Sequence[str],
        *,
        on_progress: ProgressCallback | None = None,
        concurrency: int | None = None,
    ) -> list[list[float]]:
        """Embed *texts* concurrently and return vectors in input order.

        Results are stored by position, so completion order never changes
        alignment.  ``on_progress(done, total)`` only ever reports the
        contiguous prefix of finished texts, so progress advances in text
        order even when later requests finish first.

        The first failure cancels the outstanding requests and is
        re-raised; no partial result is returned.

        Raises
        ------
        EmbeddingServiceError
            A request failed, or the vectors differ in length.
        """
        total = len(texts)
        if total == 0:
            return []

        limit = asyncio.Semaphore(concurrency or settings.embedding_concurrency)
        results: list[list[float] | None] = [None] * total
        reported = 0

        async def _embed_one(position: int) -> None:
            nonlocal reported
            async with limit:
                vector = await self.embed(texts[position])
            results[position] = coerce_embedding(vector)
            while reported < total and results[reported] is not None:
                reported += 1
                if on_progress is not None:
                    on_progress(reported, total)

        tasks = [asyncio.create_task(_embed_one(i)) for i in range(total)]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        vectors: list[list[float]] = []
        for position, vector in enumerate(results):
            if vector is None:
                raise EmbeddingServiceError(f"No embedding was produced for text {position}.")
            vectors.append(vector)
        dimensions = {len(v) for v in vectors}
        if len(dimensions) > 1:
            raise EmbeddingServiceError(
                f"Embedding service returned vectors of mixed length: {sorted(dimensions)}"
            )
        return vectors


class LangChainEmbeddingClient(EmbeddingClient):
    """Adapter over any LangChain :class:`~langchain_core.embeddings.Embeddings`.

    Parameters
    ----------
    embeddings:
        The LangChain embedding model to call.
    """

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings

    async def embed(self, text: str) -> list[float]:
        try:
            raw = await self._embeddings.aembed_query(text)
        except Exception as exc:
            logger.warning("Embedding request failed: %s", exc)
            raise EmbeddingServiceError(f"Embedding request failed: {exc}") from exc
        return coerce_embedding(raw)


def get_embedding_function() -> Embeddings:
    """Return the configured sentence-transformer embedding function."""
    from langchain_huggingface import HuggingFaceEmbeddings

    return HuggingFaceEmbeddings(model_name=settings.embedding_model)


def get_embedding_client() -> EmbeddingClient:
    """Return the default embedding client built from the global settings."""
    logger.info("Using embedding model %s", settings.embedding_model)
    return LangChainEmbeddingClient(get_embedding_function())
