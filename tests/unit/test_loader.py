"""Unit tests for PDF text extraction."""

from __future__ import annotations

import io
from unittest.mock import MagicMock, patch

from langchain_core.documents import Document
from pypdf import PdfWriter

from pdf_rag.ingestion.loader import extract_pdf_text
from pdf_rag.ingestion.models import ExtractedText, SkippedFile


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_garbage_bytes_are_skipped() -> None:
    result = extract_pdf_text("broken.pdf", b"this is not a pdf at all")
    assert isinstance(result, SkippedFile)
    assert result.source == "broken.pdf"
    assert result.reason.startswith("unreadable")


def test_pdf_without_text_is_skipped() -> None:
    result = extract_pdf_text("blank.pdf", _blank_pdf())
    assert isinstance(result, SkippedFile)
    assert result.reason == "no extractable text"


def test_pages_joined_with_blank_line() -> None:
    parser = MagicMock()
    parser.parse.return_value = [
        Document(page_content="Page one."),
        Document(page_content="Page two."),
    ]
    with patch("pdf_rag.ingestion.loader.PyPDFParser", return_value=parser):
        result = extract_pdf_text("manual.pdf", b"%PDF-1.4")

    assert isinstance(result, ExtractedText)
    assert result.source == "manual.pdf"
    assert result.text == "Page one.\n\nPage two."


def test_parser_receives_named_blob() -> None:
    parser = MagicMock()
    parser.parse.return_value = [Document(page_content="Text.")]
    with patch("pdf_rag.ingestion.loader.PyPDFParser", return_value=parser):
        extract_pdf_text("manual.pdf", b"%PDF-1.4 data")

    blob = parser.parse.call_args.args[0]
    assert blob.as_bytes() == b"%PDF-1.4 data"
    assert blob.source == "manual.pdf"
