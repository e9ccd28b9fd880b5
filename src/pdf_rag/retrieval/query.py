"""Query pipeline — question in, ranked passages with provenance out.

Usage::

    pipeline = QueryPipeline(manager)
    response = await pipeline.ask("How is the pump calibrated?")
    for passage in response.documents:
        print(passage.pdf, passage.score, passage.content[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pdf_rag.errors import InvalidQuestionError
from pdf_rag.retrieval.models import QueryResponse, RetrievedPassage

if TYPE_CHECKING:
    from langchain_core.documents import Document

    from pdf_rag.retrieval.manager import IndexManager

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "unknown"


class QueryPipeline:
    """Embed a question, search the shared index, and rank the hits.

    Parameters
    ----------
    manager:
        The index manager owning the searchable index.
    top_k:
        Number of candidates requested from the index.
    score_precision:
        Decimal places kept in each returned score.
    min_question_length:
        Shortest accepted question after trimming.
    """

    def __init__(
        self,
        manager: IndexManager,
        *,
        top_k: int = 4,
        score_precision: int = 4,
        min_question_length: int = 2,
    ) -> None:
        self._manager = manager
        self.top_k = top_k
        self.score_precision = score_precision
        self.min_question_length = min_question_length

    async def ask(self, question: str) -> QueryResponse:
        """Return the ``top_k`` best passages for *question*.

        Raises
        ------
        InvalidQuestionError
            *question* is shorter than ``min_question_length`` once trimmed.
        NoIndexError
            Nothing has been indexed yet.
        """
        question = (question or "").strip()
        if len(question) < self.min_question_length:
            raise InvalidQuestionError(
                f"Question must be at least {self.min_question_length} characters long"
            )

        hits = await self._manager.search(question, self.top_k)
        # The engine's own ordering is not relied on.
        ranked = sorted(hits, key=lambda hit: hit[1], reverse=True)
        logger.info("Question answered with %d passages", len(ranked))
        return QueryResponse(
            question=question,
            documents=[self._to_passage(doc, score) for doc, score in ranked],
        )

    def _to_passage(self, doc: Document, score: float) -> RetrievedPassage:
        source = (doc.metadata or {}).get("source") or UNKNOWN_SOURCE
        return RetrievedPassage(
            pdf=source,
            score=round(float(score), self.score_precision),
            content=doc.page_content,
        )
