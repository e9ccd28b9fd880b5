"""Index lifecycle — the one in-memory vector index and its on-disk snapshot.

Lifecycle
---------
``ABSENT`` at construction.  :meth:`IndexManager.startup` moves to
``LOADED`` when a snapshot exists on disk; otherwise the first successful
:meth:`IndexManager.add_documents` call builds the index.  Every later
batch is merged into the same index, and a full snapshot is written after
every batch.  A batch whose snapshot cannot be written is dropped again:
the first index is only published after its save succeeds, and merged
chunks are deleted from the index.

Concurrency
-----------
Batches are serialised by an ``asyncio.Lock``: the create-or-merge decision,
the add, and the save of one batch finish before the next batch starts.
Embedding happens before the index is touched.  The add itself and every
search hold a short ``threading.Lock`` so a search sees the index either
before or after a batch, never half of one.  Searches may run while a
snapshot is being written; they see the merged in-memory state, and lose
the batch again only if that save fails.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pdf_rag.errors import EmbeddingMismatchError, IndexLoadError, IndexUpdateError, NoIndexError
from pdf_rag.retrieval.faiss_store import FaissVectorIndex

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.embeddings import Embeddings

    from pdf_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

_DIMENSION_PROBE = "dimension probe"


class IndexState(str, Enum):
    ABSENT = "absent"
    LOADED = "loaded"


class IndexManager:
    """Owns the process-wide vector index.

    Parameters
    ----------
    embedding:
        Embedding provider used for chunks, questions, and snapshot loading.
    index_path:
        Directory holding the persisted snapshot.
    index_cls:
        Backend implementing :class:`~pdf_rag.retrieval.base.VectorIndexBase`.
    """

    def __init__(
        self,
        embedding: Embeddings,
        index_path: str | Path,
        *,
        index_cls: type[VectorIndexBase] = FaissVectorIndex,
    ) -> None:
        self._embedding = embedding
        self._index_path = Path(index_path)
        self._index_cls = index_cls
        self._index: VectorIndexBase | None = None
        self._write_lock = asyncio.Lock()
        self._mutation_lock = threading.Lock()

    # -- state ----------------------------------------------------------------

    @property
    def state(self) -> IndexState:
        return IndexState.ABSENT if self._index is None else IndexState.LOADED

    def stats(self) -> dict[str, Any]:
        index = self._index
        if index is None:
            return {"state": IndexState.ABSENT.value, "vectors": 0, "dimension": None}
        return {
            "state": IndexState.LOADED.value,
            "vectors": len(index),
            "dimension": index.dimension,
        }

    # -- lifecycle ------------------------------------------------------------

    async def startup(self) -> IndexState:
        """Load the persisted snapshot, if any.

        An unreadable snapshot is logged and the manager stays ``ABSENT``.
        A snapshot whose vectors do not match the embedding model raises
        :class:`EmbeddingMismatchError`; overwriting it silently would lose
        the indexed documents.
        """
        self._index_path.parent.mkdir(parents=True, exist_ok=True)
        if not self._index_cls.snapshot_exists(self._index_path):
            logger.info("No persisted index at %s; starting empty", self._index_path)
            return self.state

        try:
            index = await asyncio.to_thread(self._index_cls.load, self._index_path, self._embedding)
        except IndexLoadError:
            logger.exception("Persisted index at %s could not be loaded; starting empty", self._index_path)
            return self.state

        probe = await asyncio.to_thread(self._embedding.embed_query, _DIMENSION_PROBE)
        if len(probe) != index.dimension:
            raise EmbeddingMismatchError(expected=index.dimension, actual=len(probe))

        with self._mutation_lock:
            self._index = index
        logger.info("Loaded index with %d vectors from %s", len(index), self._index_path)
        return self.state

    async def add_documents(self, chunks: list[Document]) -> int:
        """Embed *chunks*, create or merge them into the index, then persist.

        Returns the number of vectors in the index afterwards.

        Raises
        ------
        IndexUpdateError
            Embedding, the in-memory update, or the save failed.  The batch
            is dropped from memory and the last snapshot on disk is left
            untouched.
        """
        if not chunks:
            return len(self._index) if self._index is not None else 0

        async with self._write_lock:
            try:
                vectors = await asyncio.to_thread(
                    self._embedding.embed_documents, [chunk.page_content for chunk in chunks]
                )
                if self._index is None:
                    index = await asyncio.to_thread(self._create, chunks, vectors)
                else:
                    index = await asyncio.to_thread(self._merge, self._index, chunks, vectors)
            except Exception as exc:
                logger.exception("Index update failed for a batch of %d chunks", len(chunks))
                raise IndexUpdateError(f"Failed to update the vector index: {exc}") from exc
            return len(index)

    def _create(self, chunks: list[Document], vectors: list[list[float]]) -> VectorIndexBase:
        # Published only once the first snapshot is on disk.
        index = self._index_cls.from_embeddings(chunks, vectors, self._embedding)
        index.save(self._index_path)
        with self._mutation_lock:
            self._index = index
        logger.info("Created index from %d chunks", len(chunks))
        return index

    def _merge(
        self, index: VectorIndexBase, chunks: list[Document], vectors: list[list[float]]
    ) -> VectorIndexBase:
        width = len(vectors[0])
        if width != index.dimension:
            raise EmbeddingMismatchError(expected=index.dimension, actual=width)
        with self._mutation_lock:
            ids = index.add_embeddings(chunks, vectors)
        try:
            index.save(self._index_path)
        except Exception:
            with self._mutation_lock:
                index.delete(ids)
            logger.warning("Rolled back %d chunks after a failed save", len(ids))
            raise
        logger.info("Merged %d chunks into index (%d vectors total)", len(chunks), len(index))
        return index

    # -- queries --------------------------------------------------------------

    async def search(self, question: str, k: int) -> list[tuple[Document, float]]:
        """Embed *question* and return up to *k* ``(chunk, score)`` pairs.

        Raises
        ------
        NoIndexError
            Nothing has been indexed yet.
        """
        if self._index is None:
            raise NoIndexError()
        vector = await asyncio.to_thread(self._embedding.embed_query, question)
        return await asyncio.to_thread(self._search, vector, k)

    def _search(self, vector: list[float], k: int) -> list[tuple[Document, float]]:
        with self._mutation_lock:
            index = self._index
            if index is None:
                raise NoIndexError()
            return index.similarity_search_with_score(vector, k)
