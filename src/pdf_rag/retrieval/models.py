"""Wire models for query results.

Field names (``question``, ``documents``, ``pdf``, ``score``, ``content``)
are the external contract consumed by existing clients.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RetrievedPassage(BaseModel):
    """One ranked chunk together with the file it came from."""

    pdf: str = "unknown"
    score: float
    content: str


class QueryResponse(BaseModel):
    """Passages for one question, most relevant first."""

    question: str
    documents: list[RetrievedPassage] = Field(default_factory=list)
