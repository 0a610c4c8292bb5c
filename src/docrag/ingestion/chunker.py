"""Paragraph chunking."""

from __future__ import annotations

import logging
import re

from docrag.config import settings
from docrag.errors import EmptyDocumentError
from docrag.retrieval.models import Chunk

logger = logging.getLogger(__name__)

# One or more blank (or whitespace-only) lines separate paragraphs.
PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def chunk_document(text: str, min_chars: int | None = None) -> list[Chunk]:
    """Split *text* into paragraph chunks.

    Parameters
    ----------
    text:
        Full document text.
    min_chars:
        Shortest trimmed paragraph kept (defaults to
        ``settings.min_chunk_chars``).  Shorter fragments are headers,
        stray whitespace or artifacts that would embed poorly.

    Returns
    -------
    list[Chunk]
        Chunks in document order with contiguous indices starting at 0.

    Raises
    ------
    EmptyDocumentError
        No paragraph meets the minimum length.
    """
    threshold = settings.min_chunk_chars if min_chars is None else min_chars
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")

    paragraphs = [p.strip() for p in PARAGRAPH_BREAK.split(normalized)]
    kept = [p for p in paragraphs if len(p) >= threshold]
    if not kept:
        raise EmptyDocumentError(
            "Could not find any paragraphs in the file. "
            "Please ensure it is a valid .txt file."
        )

    logger.debug(
        "Chunked %d chars into %d chunks (%d fragments dropped)",
        len(text),
        len(kept),
        len(paragraphs) - len(kept),
    )
    return [Chunk(index=i, text=p) for i, p in enumerate(kept)]
