"""
Retrieval — vector index, cosine ranking, and top-k selection.

Public surface
--------------
- :class:`SemanticRetriever` — query-text or embedding search with scores.
- :func:`retrieve` — plain top-k chunk selection over an index.
- :class:`VectorStoreBase` — abstract index backend.
- :class:`InMemoryVectorStore` — default brute-force cosine backend.
- :class:`Chunk`, :class:`RankedResult`, :class:`RetrievalResult` — data models.
"""

from docrag.retrieval.base import VectorStoreBase
from docrag.retrieval.memory_store import InMemoryVectorStore, cosine_similarity
from docrag.retrieval.models import Chunk, RankedResult, RetrievalResult
from docrag.retrieval.retriever import SemanticRetriever, retrieve

__all__ = [
    "Chunk",
    "InMemoryVectorStore",
    "RankedResult",
    "RetrievalResult",
    "SemanticRetriever",
    "VectorStoreBase",
    "cosine_similarity",
    "retrieve",
]
