"""Page chunking and byte-safe truncation."""

from __future__ import annotations

import re

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docchat_ingest.models import PageRecord, Segment

DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", " ", ""]

_NEWLINES = re.compile(r"[\r\n]")


def truncate_by_bytes(text: str, max_bytes: int) -> str:
    """Cut *text* so its UTF-8 encoding fits in *max_bytes*.

    A multi-byte character straddling the limit is dropped whole.
    """
    if max_bytes < 0:
        raise ValueError(f"max_bytes must be >= 0, got {max_bytes}")
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def strip_newlines(text: str) -> str:
    """Remove line breaks left behind by PDF text extraction."""
    return _NEWLINES.sub("", text)


def build_splitter(chunk_size: int = 1000, chunk_overlap: int = 200) -> RecursiveCharacterTextSplitter:
    """Return a recursive splitter preferring paragraph, sentence, then word breaks."""
    if chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})")
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=DEFAULT_SEPARATORS,
    )


def chunk_page(
    page: PageRecord,
    *,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
    max_bytes: int = 36_000,
) -> list[Segment]:
    """Split one page into :class:`Segment` objects ready for embedding.

    Parameters
    ----------
    page:
        Page produced by the loader.
    chunk_size:
        Maximum number of characters per segment.
    chunk_overlap:
        Number of overlapping characters between consecutive segments.
    max_bytes:
        Hard ceiling on the UTF-8 size of each segment's ``text``.

    Returns
    -------
    list[Segment]
        Segments in source order; empty for a blank page.
    """
    text = strip_newlines(page.text)
    if not text.strip():
        return []

    splitter = build_splitter(chunk_size, chunk_overlap)
    return [
        Segment(
            text=truncate_by_bytes(piece, max_bytes),
            page_number=page.page_number,
            raw_text=piece,
        )
        for piece in splitter.split_text(text)
    ]
