"""Unit tests for PDF page extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from docchat_ingest.errors import ParseError
from docchat_ingest.ingestion.loader import load_pdf_pages


def test_load_returns_one_record_per_page(blank_pdf: Path) -> None:
    pages = load_pdf_pages(blank_pdf)
    assert [p.page_number for p in pages] == [1, 2]
    assert all(not p.text.strip() for p in pages)


def test_corrupt_file_raises_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"this is definitely not a pdf document")

    with pytest.raises(ParseError) as exc_info:
        load_pdf_pages(path)
    assert exc_info.value.path == str(path)


def test_empty_file_raises_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "empty.pdf"
    path.write_bytes(b"")
    with pytest.raises(ParseError):
        load_pdf_pages(path)
