"""
docrag — chat with a single uploaded text document.

A small retrieval-augmented-generation stack: paragraph chunking,
embedding, cosine-similarity ranking and prompt assembly, wrapped in
per-user in-memory sessions and exposed through a FastAPI app.
"""

__version__ = "0.1.0"
