"""FastAPI application exposing PDF upload and question endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pdf_rag import __version__
from pdf_rag.config import Settings
from pdf_rag.config import settings as default_settings
from pdf_rag.errors import BadRequestError, IndexUpdateError, InvalidUploadError
from pdf_rag.ingestion.models import IngestResponse
from pdf_rag.ingestion.pipeline import IngestionPipeline
from pdf_rag.retrieval.faiss_store import FaissVectorIndex
from pdf_rag.retrieval.manager import IndexManager
from pdf_rag.retrieval.models import QueryResponse
from pdf_rag.retrieval.query import QueryPipeline

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from pdf_rag.retrieval.base import VectorIndexBase

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


# ── Request schemas ───────────────────────────────────────────────────
class QuestionRequest(BaseModel):
    """Incoming question from the user.

    Length is checked by :class:`QueryPipeline` after trimming.
    """

    question: str


# ── Lifespan (composition root) ───────────────────────────────────────
@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the embedding provider, index manager, and pipelines once."""
    cfg: Settings = app.state.settings
    logging.basicConfig(level=cfg.log_level)

    embedding = app.state.embedding
    if embedding is None:
        from pdf_rag.ingestion.embedder import get_embedding_function

        embedding = get_embedding_function(cfg)

    manager = IndexManager(embedding, cfg.index_path, index_cls=app.state.index_cls)
    await manager.startup()

    app.state.manager = manager
    app.state.ingestion = IngestionPipeline(
        manager,
        chunk_size=cfg.chunk_size,
        chunk_overlap=cfg.chunk_overlap,
        separators=cfg.chunk_separators,
    )
    app.state.query = QueryPipeline(
        manager,
        top_k=cfg.top_k,
        score_precision=cfg.score_precision,
        min_question_length=cfg.min_question_length,
    )
    logger.info("pdf_rag %s ready (index %s)", __version__, manager.state.value)
    yield


def _ingestion(request: Request) -> IngestionPipeline:
    return request.app.state.ingestion


def _query(request: Request) -> QueryPipeline:
    return request.app.state.query


# ── Error mapping ─────────────────────────────────────────────────────
async def _bad_request(request: Request, exc: BadRequestError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.message})


async def _internal_error(request: Request, exc: IndexUpdateError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": exc.message})


# ── Application factory ───────────────────────────────────────────────
def create_app(
    settings: Settings | None = None,
    *,
    embedding: Embeddings | None = None,
    index_cls: type[VectorIndexBase] = FaissVectorIndex,
) -> FastAPI:
    """Build the FastAPI application.

    Parameters
    ----------
    settings:
        Configuration; defaults to the environment-derived settings.
    embedding:
        Embedding provider to use instead of the configured HuggingFace model.
    index_cls:
        Vector-index backend.
    """
    app = FastAPI(
        title="PDF RAG API",
        version=__version__,
        description="Upload PDFs and retrieve the passages that best match a question.",
        lifespan=_lifespan,
    )
    app.state.settings = settings or default_settings
    app.state.embedding = embedding
    app.state.index_cls = index_cls

    app.add_exception_handler(BadRequestError, _bad_request)
    app.add_exception_handler(IndexUpdateError, _internal_error)

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        """Liveness probe with index statistics."""
        return {"status": "ok", "index": request.app.state.manager.stats()}

    @app.post(
        "/rag/upload",
        response_model=IngestResponse,
        response_model_exclude_none=True,
    )
    async def upload(
        files: list[UploadFile] | None = File(default=None),
        pipeline: IngestionPipeline = Depends(_ingestion),
    ) -> IngestResponse:
        """Index one or more uploaded PDFs (multipart field ``files``)."""
        if not files:
            raise InvalidUploadError("No file uploaded")
        for upload_file in files:
            if upload_file.content_type != PDF_MIME_TYPE:
                raise InvalidUploadError("Only PDF files are accepted")

        payload = [(f.filename or "unknown", await f.read()) for f in files]
        return await pipeline.ingest_files(payload)

    @app.post("/rag/ask", response_model=QueryResponse)
    async def ask(
        body: QuestionRequest,
        pipeline: QueryPipeline = Depends(_query),
    ) -> QueryResponse:
        """Return the best-matching passages for a question."""
        return await pipeline.ask(body.question)

    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn using the configured host and port."""
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    main()
