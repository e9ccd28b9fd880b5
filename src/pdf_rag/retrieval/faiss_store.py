"""FAISS implementation of the vector-index abstraction."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.vectorstores import FAISS

from pdf_rag.errors import IndexLoadError
from pdf_rag.retrieval.base import VectorIndexBase

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def _distance_to_score(distance: float) -> float:
    # FAISS returns L2 distances; convert to a 0-1 similarity score.
    return 1.0 / (1.0 + float(distance))


class FaissVectorIndex(VectorIndexBase):
    """Exact (flat L2) FAISS index wrapped in LangChain's ``FAISS`` store.

    Parameters
    ----------
    store:
        An already-populated LangChain ``FAISS`` vector store.
    """

    def __init__(self, store: FAISS) -> None:
        self._store = store

    # -- construction ---------------------------------------------------------

    @classmethod
    def from_embeddings(
        cls,
        documents: list[Document],
        vectors: list[list[float]],
        embedding: Embeddings,
    ) -> FaissVectorIndex:
        store = FAISS.from_embeddings(
            text_embeddings=[(doc.page_content, vec) for doc, vec in zip(documents, vectors)],
            embedding=embedding,
            metadatas=[doc.metadata for doc in documents],
        )
        return cls(store)

    @staticmethod
    def _retired(path: Path) -> Path:
        return path.with_name(f"{path.name}.old")

    @classmethod
    def snapshot_exists(cls, path: Path) -> bool:
        path = Path(path)
        return path.exists() or cls._retired(path).exists()

    @classmethod
    def load(cls, path: Path, embedding: Embeddings) -> FaissVectorIndex:
        path = Path(path)
        if not path.exists() and cls._retired(path).exists():
            # A save was interrupted between the two renames.
            path = cls._retired(path)
        try:
            store = FAISS.load_local(
                str(path),
                embedding,
                # index.pkl is a pickle written by save().
                allow_dangerous_deserialization=True,
            )
        except Exception as exc:
            raise IndexLoadError(f"Cannot read FAISS snapshot at {path}: {exc}") from exc
        return cls(store)

    # -- VectorIndexBase overrides --------------------------------------------

    def add_embeddings(self, documents: list[Document], vectors: list[list[float]]) -> list[str]:
        return self._store.add_embeddings(
            text_embeddings=[(doc.page_content, vec) for doc, vec in zip(documents, vectors)],
            metadatas=[doc.metadata for doc in documents],
        )

    def delete(self, ids: list[str]) -> None:
        self._store.delete(ids)

    def similarity_search_with_score(
        self, query_vector: list[float], k: int
    ) -> list[tuple[Document, float]]:
        hits = self._store.similarity_search_with_score_by_vector(query_vector, k=k)
        return [(doc, _distance_to_score(distance)) for doc, distance in hits]

    def save(self, path: Path) -> None:
        """Write the snapshot next to *path*, then swap it into place.

        Readers of *path* only ever see a complete old or new snapshot.
        """
        path = Path(path)
        staging = path.with_name(f"{path.name}.tmp")
        retired = self._retired(path)
        if not path.exists() and retired.exists():
            # The last swap was interrupted; the retired copy is the only snapshot.
            retired.rename(path)
        for leftover in (staging, retired):
            if leftover.exists():
                shutil.rmtree(leftover)

        self._store.save_local(str(staging))
        if path.exists():
            path.rename(retired)
        staging.rename(path)
        shutil.rmtree(retired, ignore_errors=True)
        logger.info("Saved FAISS index with %d vectors to %s", len(self), path)

    @property
    def dimension(self) -> int:
        return int(self._store.index.d)

    def __len__(self) -> int:
        return int(self._store.index.ntotal)
