"""Domain models for ingestion — per-file extraction outcomes and batch summary."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ExtractedText(BaseModel):
    """A file whose extraction produced usable text."""

    kind: Literal["extracted"] = "extracted"
    source: str
    text: str


class SkippedFile(BaseModel):
    """A file left out of the batch (unreadable or blank)."""

    kind: Literal["skipped"] = "skipped"
    source: str
    reason: str


ExtractionResult = Union[ExtractedText, SkippedFile]


class IngestResponse(BaseModel):
    """Summary of one ingestion call.

    Field aliases are the external wire names; ``total_chunks`` is left as
    ``None`` (and dropped on serialisation) when nothing was indexed.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str
    total_docs: int = Field(alias="totalDocs")
    total_chunks: int | None = Field(default=None, alias="totalChunks")
    ignored_files: list[str] = Field(default_factory=list, alias="ignoredFiles")
