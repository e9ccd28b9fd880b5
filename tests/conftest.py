"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import json
import math
import re
from pathlib import Path
from uuid import uuid4

import pytest
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from pdf_rag.retrieval.base import VectorIndexBase
from pdf_rag.retrieval.manager import IndexManager

VOCABULARY = [
    "section",
    "intro",
    "details",
    "text",
    "pump",
    "valve",
    "pressure",
    "calibration",
    "warranty",
    "battery",
    "safety",
    "install",
]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Deterministic embeddings ────────────────────────────────────────────


class VocabularyEmbeddings(Embeddings):
    """Bag-of-words over a fixed vocabulary, L2-normalised.

    A small constant first component keeps every vector non-zero.
    """

    def __init__(self, vocabulary: list[str] | None = None) -> None:
        self.vocabulary = vocabulary or VOCABULARY
        self.calls = 0

    @property
    def dimension(self) -> int:
        return len(self.vocabulary) + 1

    def _embed(self, text: str) -> list[float]:
        tokens = re.findall(r"[a-z]+", text.lower())
        vector = [0.1] + [float(tokens.count(word)) for word in self.vocabulary]
        norm = math.sqrt(sum(v * v for v in vector))
        return [v / norm for v in vector]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        return [self._embed(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed(text)


# ── In-memory fake index ────────────────────────────────────────────────


class InMemoryVectorIndex(VectorIndexBase):
    """Dot-product index that returns hits in *ascending* score order.

    Persists as a single JSON file inside the snapshot directory.
    """

    fail_on_save = False

    def __init__(self, documents: list[Document], vectors: list[list[float]]) -> None:
        self.documents = list(documents)
        self.vectors = [list(v) for v in vectors]
        self.ids = [str(uuid4()) for _ in self.documents]

    @classmethod
    def from_embeddings(cls, documents, vectors, embedding):  # noqa: ANN001, ANN206
        return cls(documents, vectors)

    @classmethod
    def load(cls, path: Path, embedding: Embeddings) -> InMemoryVectorIndex:
        payload = json.loads((Path(path) / "index.json").read_text())
        docs = [Document(page_content=r["content"], metadata=r["metadata"]) for r in payload]
        return cls(docs, [r["vector"] for r in payload])

    def add_embeddings(self, documents: list[Document], vectors: list[list[float]]) -> list[str]:
        ids = [str(uuid4()) for _ in documents]
        self.documents.extend(documents)
        self.vectors.extend(list(v) for v in vectors)
        self.ids.extend(ids)
        return ids

    def delete(self, ids: list[str]) -> None:
        dropped = set(ids)
        keep = [i for i, doc_id in enumerate(self.ids) if doc_id not in dropped]
        self.documents = [self.documents[i] for i in keep]
        self.vectors = [self.vectors[i] for i in keep]
        self.ids = [self.ids[i] for i in keep]

    def similarity_search_with_score(
        self, query_vector: list[float], k: int
    ) -> list[tuple[Document, float]]:
        scored = [
            (doc, sum(a * b for a, b in zip(vec, query_vector)))
            for doc, vec in zip(self.documents, self.vectors)
        ]
        top = sorted(scored, key=lambda hit: hit[1], reverse=True)[:k]
        return list(reversed(top))

    def save(self, path: Path) -> None:
        if self.fail_on_save:
            raise OSError("disk full")
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        payload = [
            {"content": d.page_content, "metadata": d.metadata, "vector": v}
            for d, v in zip(self.documents, self.vectors)
        ]
        (path / "index.json").write_text(json.dumps(payload))

    @property
    def dimension(self) -> int:
        return len(self.vectors[0]) if self.vectors else 0

    def __len__(self) -> int:
        return len(self.documents)


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def embedding() -> VocabularyEmbeddings:
    return VocabularyEmbeddings()


@pytest.fixture()
def index_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "faiss_store"


@pytest.fixture()
def faiss_manager(embedding: VocabularyEmbeddings, index_path: Path) -> IndexManager:
    return IndexManager(embedding, index_path)


@pytest.fixture()
def fake_manager(
    embedding: VocabularyEmbeddings, index_path: Path, fake_index_cls: type[InMemoryVectorIndex]
) -> IndexManager:
    return IndexManager(embedding, index_path, index_cls=fake_index_cls)


@pytest.fixture()
def fake_index_cls(monkeypatch: pytest.MonkeyPatch) -> type[InMemoryVectorIndex]:
    monkeypatch.setattr(InMemoryVectorIndex, "fail_on_save", False)
    return InMemoryVectorIndex


@pytest.fixture()
def make_embedding() -> type[VocabularyEmbeddings]:
    return VocabularyEmbeddings
