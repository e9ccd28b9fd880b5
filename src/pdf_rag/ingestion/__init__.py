"""
Ingestion — PDF text extraction, chunking, and embedding into the index.

This module turns uploaded PDFs into overlapping text chunks tagged with
their source filename and hands them to the index manager, which embeds
and persists them.
"""
