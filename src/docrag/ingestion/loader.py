"""Document input boundary — validate and decode uploaded text files."""

from __future__ import annotations

import logging
from pathlib import PurePath

from pydantic import BaseModel

from docrag.config import settings
from docrag.errors import DocumentTooLargeError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPE = "text/plain"
_GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}
_TEXT_SUFFIXES = {".txt"}


class SourceDocument(BaseModel):
    """A decoded upload, held only for the duration of one ingestion."""

    name: str
    text: str


def _media_type(content_type: str | None) -> str:
    """Strip parameters such as ``charset`` from a content type."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_text_upload(filename: str | None, content_type: str | None) -> bool:
    """Return ``True`` when the upload can be treated as plain text.

    ``text/plain`` is always accepted.  Browsers and HTTP clients often send
    no type or ``application/octet-stream``; in that case the ``.txt``
    suffix decides.
    """
    media_type = _media_type(content_type)
    if media_type == TEXT_CONTENT_TYPE:
        return True
    if media_type in _GENERIC_CONTENT_TYPES and filename:
        return PurePath(filename).suffix.lower() in _TEXT_SUFFIXES
    return False


def load_text_document(
    data: bytes,
    *,
    filename: str | None = None,
    content_type: str | None = None,
    max_bytes: int | None = None,
) -> SourceDocument:
    """Validate an upload and decode it into a :class:`SourceDocument`.

    Parameters
    ----------
    data:
        Raw bytes of the uploaded file.
    filename:
        Client-supplied file name, used for display and suffix checks.
    content_type:
        Client-supplied MIME type.
    max_bytes:
        Size limit (defaults to ``settings.max_document_bytes``).

    Raises
    ------
    UnsupportedFileTypeError
        The upload is not plain text or is not valid UTF-8.
    DocumentTooLargeError
        The upload is larger than *max_bytes*.
    """
    name = filename or "document.txt"
    if not is_text_upload(filename, content_type):
        logger.warning("Rejected upload %r with content type %r", name, content_type)
        raise UnsupportedFileTypeError(
            f"Unsupported file type {content_type or 'unknown'} for {name!r}; "
            "please upload a .txt file."
        )

    limit = settings.max_document_bytes if max_bytes is None else max_bytes
    if len(data) > limit:
        raise DocumentTooLargeError(
            f"{name!r} is {len(data)} bytes; the maximum is {limit} bytes."
        )

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UnsupportedFileTypeError(f"{name!r} is not valid UTF-8 text.") from exc

    logger.info("Loaded %r (%d bytes)", name, len(data))
    return SourceDocument(name=name, text=text)
