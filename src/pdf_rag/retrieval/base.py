"""Abstract base class for vector-index backends.

A backend stores ``(embedding, chunk)`` pairs, answers nearest-neighbour
queries, and round-trips through a directory on disk.  Embedding is done
by the caller, so backends never talk to the embedding model except to
hand it back to LangChain on load.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.embeddings import Embeddings

_IndexT = TypeVar("_IndexT", bound="VectorIndexBase")


class VectorIndexBase(ABC):
    """Backend-agnostic vector-index interface."""

    # -- construction ---------------------------------------------------------

    @classmethod
    @abstractmethod
    def from_embeddings(
        cls: type[_IndexT],
        documents: list[Document],
        vectors: list[list[float]],
        embedding: Embeddings,
    ) -> _IndexT:
        """Build a new index holding *documents* with their precomputed *vectors*."""
        ...

    @classmethod
    def snapshot_exists(cls, path: Path) -> bool:
        """Return ``True`` when a snapshot can be loaded from *path*."""
        return Path(path).exists()

    @classmethod
    @abstractmethod
    def load(cls: type[_IndexT], path: Path, embedding: Embeddings) -> _IndexT:
        """Read a snapshot previously written by :meth:`save`."""
        ...

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def add_embeddings(self, documents: list[Document], vectors: list[list[float]]) -> list[str]:
        """Append *documents* with their precomputed *vectors*; return their ids."""
        ...

    @abstractmethod
    def delete(self, ids: list[str]) -> None:
        """Remove the entries returned by an earlier :meth:`add_embeddings`."""
        ...

    @abstractmethod
    def similarity_search_with_score(
        self, query_vector: list[float], k: int
    ) -> list[tuple[Document, float]]:
        """Return up to *k* ``(chunk, score)`` pairs for *query_vector*.

        Scores are similarities: higher means more relevant.  The order of
        the returned list is whatever the engine produces.
        """
        ...

    @abstractmethod
    def save(self, path: Path) -> None:
        """Write a full snapshot to *path*, replacing any previous one."""
        ...

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of the stored vectors."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...
