"""Ingestion orchestrator — stored PDF in, namespaced vectors out.

Usage::

    from docchat_ingest.pipeline import ingest_document

    segments = await ingest_document("uploads/1718000000000report.pdf")

Stages run as fetch → extract → chunk (per page, concurrently) →
embed + hash (per segment, bounded concurrency) → batched upsert.  Any
stage failure surfaces as one :class:`~docchat_ingest.errors.IngestionError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from functools import lru_cache
from typing import TypeVar

from docchat_ingest.config import settings
from docchat_ingest.errors import IndexWriteError, IngestionError, PipelineStageError
from docchat_ingest.indexing.base import VectorIndexBase
from docchat_ingest.indexing.batching import chunked_upsert
from docchat_ingest.ingestion.chunker import build_splitter, chunk_page
from docchat_ingest.ingestion.embedder import Embedder
from docchat_ingest.ingestion.fetcher import BlobFetcherBase
from docchat_ingest.ingestion.identity import namespace_for_key
from docchat_ingest.ingestion.loader import load_pdf_pages
from docchat_ingest.models import EmbeddingVector, PageRecord, Segment

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def _gather_or_cancel(coros: Iterable[Awaitable[T]]) -> list[T]:
    """Await all *coros*; on the first failure cancel the rest, then re-raise."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _bounded(limit: int, func: Callable[[T], Awaitable[R]]) -> Callable[[T], Awaitable[R]]:
    """Wrap *func* so at most *limit* calls run at once.

    Once any call fails, queued calls are cancelled instead of started.
    """
    semaphore = asyncio.Semaphore(limit)
    failed = asyncio.Event()

    async def run(item: T) -> R:
        async with semaphore:
            if failed.is_set():
                raise asyncio.CancelledError
            try:
                return await func(item)
            except Exception:
                failed.set()
                raise

    return run


class IngestionPipeline:
    """Turns one stored document into vectors in its own index namespace.

    Parameters
    ----------
    fetcher:
        Blob store the document is read from.
    embedder:
        Shared embedding client.
    index:
        Vector index backend.
    chunk_size / chunk_overlap:
        Splitter configuration, in characters.
    max_segment_bytes:
        UTF-8 ceiling applied to each segment before embedding.
    upsert_batch_size:
        Vectors per index write.
    embedding_concurrency:
        Maximum number of embedding calls in flight.
    """

    def __init__(
        self,
        fetcher: BlobFetcherBase,
        embedder: Embedder,
        index: VectorIndexBase,
        *,
        chunk_size: int = settings.chunk_size,
        chunk_overlap: int = settings.chunk_overlap,
        max_segment_bytes: int = settings.max_segment_bytes,
        upsert_batch_size: int = settings.upsert_batch_size,
        embedding_concurrency: int = settings.embedding_concurrency,
    ) -> None:
        if embedding_concurrency < 1:
            raise ValueError(f"embedding_concurrency must be >= 1, got {embedding_concurrency}")
        if upsert_batch_size < 1:
            raise ValueError(f"upsert_batch_size must be >= 1, got {upsert_batch_size}")
        if max_segment_bytes < 1:
            raise ValueError(f"max_segment_bytes must be >= 1, got {max_segment_bytes}")
        # Fail on a bad splitter configuration now rather than mid-run.
        build_splitter(chunk_size, chunk_overlap)

        self.fetcher = fetcher
        self.embedder = embedder
        self.index = index
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_segment_bytes = max_segment_bytes
        self.upsert_batch_size = upsert_batch_size
        self.embedding_concurrency = embedding_concurrency

    # -- public API -----------------------------------------------------------

    async def ingest(self, key: str) -> list[Segment]:
        """Ingest the document stored under *key*.

        Returns
        -------
        list[Segment]
            Segments of the first page, as a representative artifact for
            the caller.  Empty when the document has no pages.

        Raises
        ------
        IngestionError
            Wrapping the first stage error encountered.
        """
        stage = "fetch"
        try:
            path = await asyncio.to_thread(self.fetcher.fetch, key)

            stage = "extract"
            try:
                pages = await asyncio.to_thread(load_pdf_pages, path)
            finally:
                self.fetcher.release(path)

            stage = "chunk"
            per_page = await self._chunk_pages(pages)
            segments = [segment for page_segments in per_page for segment in page_segments]
            logger.info("Split %d pages of %r into %d segments", len(pages), key, len(segments))

            stage = "embed"
            vectors = await self._embed_segments(segments)

            stage = "index"
            namespace = namespace_for_key(key)
            written = await chunked_upsert(self.index, namespace, vectors, self.upsert_batch_size)
        except PipelineStageError as exc:
            partially_written = isinstance(exc, IndexWriteError) and exc.committed > 0
            logger.error("Ingestion of %r failed during %s: %s", key, stage, exc)
            raise IngestionError(key, stage, exc, partially_written=partially_written) from exc

        logger.info("Ingested %r: %d vectors into namespace %r", key, written, namespace)
        return per_page[0] if per_page else []

    # -- stages ---------------------------------------------------------------

    async def _chunk_pages(self, pages: list[PageRecord]) -> list[list[Segment]]:
        return await _gather_or_cancel(
            asyncio.to_thread(
                chunk_page,
                page,
                chunk_size=self.chunk_size,
                chunk_overlap=self.chunk_overlap,
                max_bytes=self.max_segment_bytes,
            )
            for page in pages
        )

    async def _embed_segments(self, segments: list[Segment]) -> list[EmbeddingVector]:
        async def embed_one(segment: Segment) -> EmbeddingVector:
            values = await self.embedder.embed(segment.text)
            return EmbeddingVector.from_segment(segment, values)

        embed_bounded = _bounded(self.embedding_concurrency, embed_one)
        return await _gather_or_cancel(embed_bounded(segment) for segment in segments)


# ---------------------------------------------------------------------------
# Process-wide default pipeline
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_default_pipeline() -> IngestionPipeline:
    """Build the S3 + OpenAI + Pinecone pipeline from ``settings`` once."""
    from docchat_ingest.indexing.pinecone_index import PineconeVectorIndex
    from docchat_ingest.ingestion.fetcher import S3BlobFetcher

    return IngestionPipeline(
        fetcher=S3BlobFetcher(),
        embedder=Embedder(),
        index=PineconeVectorIndex(),
    )


async def ingest_document(key: str) -> list[Segment]:
    """Ingest *key* with the default pipeline.  See :meth:`IngestionPipeline.ingest`."""
    return await get_default_pipeline().ingest(key)
