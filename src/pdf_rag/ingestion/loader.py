"""PDF text extraction — thin wrapper around LangChain's ``PyPDFParser``."""

from __future__ import annotations

from langchain_community.document_loaders.parsers.pdf import PyPDFParser
from langchain_core.documents.base import Blob

from pdf_rag.ingestion.models import ExtractedText, ExtractionResult, SkippedFile


def extract_pdf_text(source: str, data: bytes) -> ExtractionResult:
    """Extract the plain text of an in-memory PDF.

    Parameters
    ----------
    source:
        Original filename, carried through as provenance.
    data:
        Raw PDF bytes.

    Returns
    -------
    ExtractionResult
        :class:`ExtractedText` with pages joined by a blank line, or
        :class:`SkippedFile` when the file cannot be parsed or holds no
        text.  Never raises for a bad file.
    """
    try:
        pages = PyPDFParser().parse(Blob.from_data(data, path=source, mime_type="application/pdf"))
    except Exception as exc:  # noqa: BLE001
        return SkippedFile(source=source, reason=f"unreadable: {exc}")

    text = "\n\n".join(page.page_content for page in pages)
    if not text.strip():
        return SkippedFile(source=source, reason="no extractable text")
    return ExtractedText(source=source, text=text)
