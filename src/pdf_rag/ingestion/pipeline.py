"""Ingestion pipeline — extracted files in, indexed chunks out.

Steps for one batch:

1. Keep the files whose extraction produced non-blank text; record the
   others in ``ignoredFiles``.
2. Stop early, without touching the index, when nothing is left.
3. Chunk all kept documents in one call (chunks never span two files).
4. Hand the chunks to the :class:`~pdf_rag.retrieval.manager.IndexManager`,
   which embeds, creates or merges, and persists.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from langchain_core.documents import Document

from pdf_rag.ingestion.chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_SEPARATORS,
    chunk_documents,
)
from pdf_rag.ingestion.loader import extract_pdf_text
from pdf_rag.ingestion.models import (
    ExtractedText,
    ExtractionResult,
    IngestResponse,
    SkippedFile,
)

if TYPE_CHECKING:
    from pdf_rag.retrieval.manager import IndexManager

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "PDFs indexed successfully"
NOTHING_INDEXED_MESSAGE = "No PDF indexed. All files were empty or unreadable"

Extractor = Callable[[str, bytes], ExtractionResult]


class IngestionPipeline:
    """Turn uploaded files into chunks stored in the shared index.

    Parameters
    ----------
    manager:
        The index manager that owns the index.
    extractor:
        ``(filename, bytes) -> ExtractionResult`` used by :meth:`ingest_files`.
    chunk_size / chunk_overlap / separators:
        Chunking policy, see :func:`~pdf_rag.ingestion.chunker.chunk_documents`.
    """

    def __init__(
        self,
        manager: IndexManager,
        *,
        extractor: Extractor = extract_pdf_text,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
    ) -> None:
        self._manager = manager
        self._extractor = extractor
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = tuple(separators)

    async def ingest_files(self, files: Iterable[tuple[str, bytes]]) -> IngestResponse:
        """Extract each ``(filename, bytes)`` pair, then :meth:`ingest` the results."""
        outcomes = [await asyncio.to_thread(self._extractor, name, data) for name, data in files]
        return await self.ingest(outcomes)

    async def ingest(self, outcomes: Iterable[ExtractionResult]) -> IngestResponse:
        """Index every :class:`ExtractedText` in *outcomes*.

        Raises
        ------
        IndexUpdateError
            Embedding, merging, or saving the batch failed.
        """
        documents: list[Document] = []
        ignored: list[str] = []

        for outcome in outcomes:
            if isinstance(outcome, ExtractedText) and outcome.text.strip():
                documents.append(
                    Document(page_content=outcome.text, metadata={"source": outcome.source})
                )
                continue
            reason = outcome.reason if isinstance(outcome, SkippedFile) else "blank text"
            logger.warning("Ignoring %s: %s", outcome.source, reason)
            ignored.append(outcome.source)

        if not documents:
            return IngestResponse(
                message=NOTHING_INDEXED_MESSAGE,
                total_docs=0,
                ignored_files=ignored,
            )

        chunks = chunk_documents(
            documents,
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=self.separators,
        )
        total_vectors = await self._manager.add_documents(chunks)
        logger.info(
            "Indexed %d documents as %d chunks (%d vectors total, %d files ignored)",
            len(documents),
            len(chunks),
            total_vectors,
            len(ignored),
        )
        return IngestResponse(
            message=SUCCESS_MESSAGE,
            total_docs=len(documents),
            total_chunks=len(chunks),
            ignored_files=ignored,
        )
