"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest
from pypdf import PdfWriter

from docchat_ingest.errors import EmbeddingError
from docchat_ingest.indexing.base import VectorIndexBase


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ───────────────────────────────────────────────────────────────


class FakeVectorIndex(VectorIndexBase):
    """In-memory index that records every upsert call.

    ``fail_on_call`` makes the n-th call (0-based) raise.
    """

    def __init__(self, fail_on_call: int | None = None) -> None:
        super().__init__("test-index")
        self.fail_on_call = fail_on_call
        self.calls: list[tuple[str, list[dict[str, Any]]]] = []
        self.committed: dict[str, dict[str, dict[str, Any]]] = {}

    def upsert(self, namespace: str, records: list[dict[str, Any]]) -> None:
        call_number = len(self.calls)
        self.calls.append((namespace, records))
        if call_number == self.fail_on_call:
            raise ConnectionError("index unavailable")
        bucket = self.committed.setdefault(namespace, {})
        for record in records:
            bucket[record["id"]] = record

    def health_check(self) -> bool:
        return True


class FakeEmbedder:
    """Deterministic async embedder; raises for texts listed in ``fail_on``."""

    def __init__(self, dim: int = 4, fail_on: set[str] | None = None) -> None:
        self.dim = dim
        self.fail_on = fail_on or set()
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if text in self.fail_on:
                raise EmbeddingError(f"service rejected {text!r}")
            return [float(len(text))] + [0.5] * (self.dim - 1)
        finally:
            self.in_flight -= 1


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def fake_index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture()
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def blank_pdf(tmp_path: Path) -> Path:
    """A two-page PDF without any text."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    writer.add_blank_page(width=612, height=792)
    path = tmp_path / "blank.pdf"
    with open(path, "wb") as fh:
        writer.write(fh)
    return path
