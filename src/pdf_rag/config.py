"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings, populated from ``PDF_RAG_*`` env vars or a .env file."""

    # Embedding
    embedding_model: str = Field(
        default="BAAI/bge-m3",
        description="HuggingFace model id or local path of the sentence-transformer model",
    )
    embedding_device: str = "cpu"
    normalize_embeddings: bool = True

    # Persistence
    data_dir: Path = Path("data")
    index_dir_name: str = "faiss_store"

    # Chunking
    chunk_size: int = Field(default=1400, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    chunk_separators: list[str] = Field(default_factory=lambda: ["\n\n", ". ", "? ", "! ", "\n"])

    # Retrieval
    top_k: int = Field(default=4, gt=0)
    score_precision: int = Field(default=4, ge=0)
    min_question_length: int = Field(default=2, ge=1)

    # Serving
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PDF_RAG_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be < chunk_size ({self.chunk_size})"
            )
        return self

    @property
    def index_path(self) -> Path:
        """Directory holding the single persisted index snapshot."""
        return self.data_dir / self.index_dir_name


# Default instance — the composition root may build its own.
settings = Settings()
