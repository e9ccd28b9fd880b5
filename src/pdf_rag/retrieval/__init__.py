"""
Retrieval — the persisted vector index and similarity queries against it.

Public surface
--------------
- :class:`IndexManager` — owns the single index (load, create, merge, save).
- :class:`QueryPipeline` — question → ranked passages with provenance.
- :class:`VectorIndexBase` — abstract backend (subclass for other engines).
- :class:`FaissVectorIndex` — default FAISS backend.
- :class:`QueryResponse`, :class:`RetrievedPassage` — wire models.
"""

from pdf_rag.retrieval.base import VectorIndexBase
from pdf_rag.retrieval.faiss_store import FaissVectorIndex
from pdf_rag.retrieval.manager import IndexManager, IndexState
from pdf_rag.retrieval.models import QueryResponse, RetrievedPassage
from pdf_rag.retrieval.query import QueryPipeline

__all__ = [
    "FaissVectorIndex",
    "IndexManager",
    "IndexState",
    "QueryPipeline",
    "QueryResponse",
    "RetrievedPassage",
    "VectorIndexBase",
]
