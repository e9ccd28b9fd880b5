"""Embedding provider — one model shared by chunks and questions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_huggingface import HuggingFaceEmbeddings

from pdf_rag.config import settings as default_settings

if TYPE_CHECKING:
    from pdf_rag.config import Settings


def get_embedding_function(settings: Settings | None = None) -> HuggingFaceEmbeddings:
    """Return the configured sentence-transformer embedding function.

    The same instance must be used to build, extend, load, and query the
    index; a different model changes the vector dimension and invalidates
    any persisted snapshot.
    """
    settings = settings or default_settings
    return HuggingFaceEmbeddings(
        model_name=settings.embedding_model,
        model_kwargs={"device": settings.embedding_device},
        encode_kwargs={"normalize_embeddings": settings.normalize_embeddings},
    )
