"""Error taxonomy shared by ingestion, retrieval and the session layer."""

from __future__ import annotations


class DocRagError(Exception):
    """Base class for every error raised by :mod:`docrag`."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedFileTypeError(DocRagError):
    """The uploaded file is not plain text. Raised before any state changes."""


class DocumentTooLargeError(DocRagError):
    """The uploaded file exceeds ``settings.max_document_bytes``."""


class EmptyDocumentError(DocRagError):
    """Chunking found no paragraph long enough to embed."""


class EmbeddingServiceError(DocRagError):
    """The embedding provider failed or returned an unusable vector."""


class GenerationServiceError(DocRagError):
    """The generation provider failed or returned no text."""


class SessionNotReadyError(DocRagError):
    """A question was asked before a document finished ingesting."""


class SessionBusyError(DocRagError):
    """A question was asked while another one is still outstanding."""


class IngestionSupersededError(DocRagError):
    """A newer upload started before this ingestion could commit."""


class SessionNotFoundError(DocRagError):
    """No session is registered under the requested id."""
