"""Exception hierarchy for pdf_rag.

    PdfRagError                  (base)
    +-- BadRequestError          (caller must change the request; HTTP 400)
    |   +-- InvalidQuestionError
    |   +-- InvalidUploadError
    |   +-- NoIndexError
    +-- IndexUpdateError         (embed / merge / save failed; HTTP 500)
    +-- IndexLoadError           (persisted snapshot unreadable)
    +-- EmbeddingMismatchError   (snapshot built with another embedding model)

Per-file extraction problems are not exceptions: they are reported as
:class:`~pdf_rag.ingestion.models.SkippedFile` outcomes.
"""

from __future__ import annotations


class PdfRagError(Exception):
    """Base exception carrying a human-readable ``message``."""

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        self._message = message
        super().__init__(message)

    @property
    def message(self) -> str:
        return self._message


class BadRequestError(PdfRagError):
    """The request cannot be served as sent."""


class InvalidQuestionError(BadRequestError):
    def __init__(self, message: str = "Question is empty or too short") -> None:
        super().__init__(message)


class InvalidUploadError(BadRequestError):
    def __init__(self, message: str = "No file uploaded") -> None:
        super().__init__(message)


class NoIndexError(BadRequestError):
    """Raised when querying before any document has been indexed."""

    def __init__(self, message: str = "No document indexed. Upload PDFs first") -> None:
        super().__init__(message)


class IndexUpdateError(PdfRagError):
    """Creating, merging, or persisting the index failed for a whole batch."""

    def __init__(self, message: str = "Failed to update the vector index") -> None:
        super().__init__(message)


class IndexLoadError(PdfRagError):
    def __init__(self, message: str = "Failed to load the persisted vector index") -> None:
        super().__init__(message)


class EmbeddingMismatchError(PdfRagError):
    """The persisted index and the embedding model disagree on vector size."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding dimension mismatch: index holds {expected}-d vectors, "
            f"embedding model produces {actual}-d vectors"
        )
