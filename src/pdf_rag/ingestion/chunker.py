"""Text chunking — recursive separator splitting with overlap.

Text is cut along the most semantic boundary available (paragraph, then
sentence end, then line), recursing into any piece that is still longer
than ``chunk_size`` and hard-cutting at ``chunk_size`` characters once the
separators run out.  The resulting pieces are then packed greedily into
chunks, and each new chunk starts with up to ``chunk_overlap`` characters
taken from the end of the previous one.

Separators stay attached to the piece they terminate, so every chunk is an
exact slice of its source text.
"""

from __future__ import annotations

import copy
from collections import deque
from collections.abc import Iterable, Sequence
from typing import Any

from langchain_core.documents import Document
from langchain_text_splitters import TextSplitter

DEFAULT_CHUNK_SIZE = 1400
DEFAULT_CHUNK_OVERLAP = 200
DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", ". ", "? ", "! ", "\n")


def _split_keeping_separator(text: str, separator: str) -> list[str]:
    pieces: list[str] = []
    start = 0
    while True:
        idx = text.find(separator, start)
        if idx == -1:
            break
        end = idx + len(separator)
        pieces.append(text[start:end])
        start = end
    if start < len(text):
        pieces.append(text[start:])
    return pieces


def _atomic_pieces(text: str, chunk_size: int, separators: Sequence[str]) -> list[str]:
    """Break *text* into contiguous pieces no longer than *chunk_size*."""
    if len(text) <= chunk_size:
        return [text]

    for i, separator in enumerate(separators):
        if separator and separator in text:
            pieces: list[str] = []
            for part in _split_keeping_separator(text, separator):
                pieces.extend(_atomic_pieces(part, chunk_size, separators[i + 1 :]))
            return pieces

    return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]


def _merge_pieces(
    pieces: Iterable[str], chunk_size: int, chunk_overlap: int
) -> list[tuple[int, str]]:
    chunks: list[tuple[int, str]] = []
    window: deque[tuple[int, str]] = deque()
    total = 0
    offset = 0

    def emit() -> None:
        chunks.append((window[0][0], "".join(piece for _, piece in window)))

    for piece in pieces:
        size = len(piece)
        if window and total + size > chunk_size:
            emit()
            # Keep a tail of the emitted chunk as the next chunk's overlap.
            while window and (total > chunk_overlap or total + size > chunk_size):
                total -= len(window.popleft()[1])
        window.append((offset, piece))
        total += size
        offset += size

    if window:
        emit()
    return [(start, chunk) for start, chunk in chunks if chunk.strip()]


def split_spans(
    text: str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    separators: Sequence[str] = DEFAULT_SEPARATORS,
) -> list[tuple[int, str]]:
    """Split *text* into ``(start_index, chunk)`` pairs.

    ``text[start_index:start_index + len(chunk)] == chunk`` holds for every
    pair, chunks never exceed *chunk_size*, and whitespace-only chunks are
    dropped, so blank text yields an empty list.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    if chunk_overlap < 0:
        raise ValueError("chunk_overlap must be >= 0")
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
        )

    pieces = _atomic_pieces(text, chunk_size, tuple(separators))
    return _merge_pieces(pieces, chunk_size, chunk_overlap)


def recursive_split(
    text: str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    separators: Sequence[str] = DEFAULT_SEPARATORS,
) -> list[str]:
    """Same as :func:`split_spans` without the offsets."""
    spans = split_spans(
        text, chunk_size=chunk_size, chunk_overlap=chunk_overlap, separators=separators
    )
    return [chunk for _, chunk in spans]


class RecursiveSeparatorSplitter(TextSplitter):
    """LangChain ``TextSplitter`` backed by :func:`split_spans`.

    ``start_index`` offsets come straight from the split instead of being
    searched for afterwards, so they stay exact on repetitive text.
    """

    def __init__(
        self,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._separators = tuple(separators)

    def _spans(self, text: str) -> list[tuple[int, str]]:
        return split_spans(
            text,
            chunk_size=self._chunk_size,
            chunk_overlap=self._chunk_overlap,
            separators=self._separators,
        )

    def split_text(self, text: str) -> list[str]:
        return [chunk for _, chunk in self._spans(text)]

    def create_documents(
        self, texts: list[str], metadatas: list[dict[Any, Any]] | None = None
    ) -> list[Document]:
        _metadatas = metadatas or [{}] * len(texts)
        documents: list[Document] = []
        for text, metadata in zip(texts, _metadatas):
            for start, chunk in self._spans(text):
                chunk_metadata = copy.deepcopy(metadata)
                if self._add_start_index:
                    chunk_metadata["start_index"] = start
                documents.append(Document(page_content=chunk, metadata=chunk_metadata))
        return documents


def chunk_documents(
    documents: list[Document],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    separators: Sequence[str] = DEFAULT_SEPARATORS,
) -> list[Document]:
    """Split *documents* into smaller chunks for embedding.

    Parameters
    ----------
    documents:
        Source documents, one per extracted file.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Maximum number of characters repeated between consecutive chunks
        of the same document.
    separators:
        Split boundaries, most semantic first.

    Returns
    -------
    list[Document]
        Chunks in document order.  Each carries a copy of its source
        document's metadata plus ``start_index``; no chunk spans two
        documents.
    """
    splitter = RecursiveSeparatorSplitter(
        separators=separators,
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        add_start_index=True,
    )
    return splitter.split_documents(documents)
