"""
pdf_rag — PDF ingestion and passage retrieval over a persisted vector index.

Uploaded PDFs are reduced to text, split into overlapping chunks, embedded,
and merged into a single FAISS index that survives restarts.  Questions are
embedded with the same model and answered with the best-matching passages.
"""

__version__ = "0.1.0"
