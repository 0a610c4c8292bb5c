"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import asyncio

import pytest
from langchain_core.embeddings import Embeddings

from docrag.errors import EmbeddingServiceError, GenerationServiceError
from docrag.generation.llm import GenerationClient
from docrag.ingestion.embedder import EmbeddingClient

KEYWORDS = ("cat", "dog", "bird", "fish")


def keyword_vector(text: str) -> list[float]:
    """One-hot-by-keyword embedding: one dimension per entry in KEYWORDS."""
    lowered = text.lower()
    return [1.0 if word in lowered else 0.0 for word in KEYWORDS]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ──────────────────────────────────────────────────────────────


class KeywordEmbeddings(Embeddings):
    """LangChain embedding model producing :func:`keyword_vector` outputs."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [keyword_vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return keyword_vector(text)


class KeywordEmbeddingClient(EmbeddingClient):
    """Deterministic embedding client with optional gating and failures.

    Parameters
    ----------
    gate_on:
        Texts containing this substring wait for :attr:`gate` to be set.
    fail_on:
        Texts containing this substring raise ``EmbeddingServiceError``.
    """

    def __init__(self, *, gate_on: str | None = None, fail_on: str | None = None) -> None:
        self.gate_on = gate_on
        self.fail_on = fail_on
        self.gate = asyncio.Event()
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.gate_on is not None and self.gate_on in text:
            await self.gate.wait()
        if self.fail_on is not None and self.fail_on in text:
            raise EmbeddingServiceError("quota exceeded")
        self.completed.append(text)
        return keyword_vector(text)


class RecordingGenerationClient(GenerationClient):
    """Records prompts and answers with a canned reply."""

    def __init__(self, reply: str = "It is about cats.", *, fail: bool = False) -> None:
        self.reply = reply
        self.fail = fail
        self.gate: asyncio.Event | None = None
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise GenerationServiceError("model overloaded")
        return self.reply

    async def generate_with_image(self, prompt: str, image_bytes: bytes, mime_type: str) -> str:
        self.prompts.append(prompt)
        return f"{self.reply} ({mime_type}, {len(image_bytes)} bytes)"


# ── Fixtures ───────────────────────────────────────────────────────────

CATS_AND_DOGS = (
    "Paragraph one about cats.\n\n"
    "Paragraph two about dogs.\n\n"
    "Paragraph three about cats and dogs."
)


@pytest.fixture()
def embedding_client() -> KeywordEmbeddingClient:
    return KeywordEmbeddingClient()


@pytest.fixture()
def generator() -> RecordingGenerationClient:
    return RecordingGenerationClient()


@pytest.fixture()
def cats_and_dogs() -> str:
    return CATS_AND_DOGS


@pytest.fixture()
def make_embedding_client() -> type[KeywordEmbeddingClient]:
    return KeywordEmbeddingClient


@pytest.fixture()
def make_generator() -> type[RecordingGenerationClient]:
    return RecordingGenerationClient


@pytest.fixture()
def keyword_embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()
