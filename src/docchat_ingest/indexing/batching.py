"""Sequential batched upserts with fail-fast semantics.

Batches are written one at a time, in order.  When batch ``i`` fails,
batches ``0..i-1`` are already durable and nothing after ``i`` is sent.
There is no rollback: re-running ingestion for the same document
re-upserts the same content-addressed ids and fills in the gap.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Sequence
from typing import TypeVar

from docchat_ingest.errors import IndexWriteError
from docchat_ingest.indexing.base import VectorIndexBase
from docchat_ingest.models import EmbeddingVector

logger = logging.getLogger(__name__)

T = TypeVar("T")


def iter_batches(items: Sequence[T], batch_size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most *batch_size* items."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, len(items), batch_size):
        yield items[start : start + batch_size]


async def chunked_upsert(
    index: VectorIndexBase,
    namespace: str,
    vectors: Sequence[EmbeddingVector],
    batch_size: int = 10,
) -> int:
    """Upsert *vectors* into *namespace*, one batch per remote call.

    Parameters
    ----------
    index:
        Target backend.
    namespace:
        Partition of the index owned by one document.
    vectors:
        Vectors to write; their order defines batch boundaries.
    batch_size:
        Maximum vectors per call.

    Returns
    -------
    int
        Number of vectors written.

    Raises
    ------
    IndexWriteError
        On the first failing batch.  Remaining batches are not attempted.
    """
    committed = 0
    for batch_index, batch in enumerate(iter_batches(vectors, batch_size)):
        records = [vector.to_record() for vector in batch]
        try:
            await asyncio.to_thread(index.upsert, namespace, records)
        except Exception as exc:
            logger.error(
                "Upsert of batch %d (vectors %d-%d) into namespace %r failed: %s",
                batch_index,
                committed,
                committed + len(records),
                namespace,
                exc,
            )
            raise IndexWriteError(
                f"Batch {batch_index} failed after {committed} vectors were committed: {exc}",
                namespace=namespace,
                batch_index=batch_index,
                committed=committed,
            ) from exc
        committed += len(records)
        logger.info("Upserted batch %d (%d vectors) into namespace %r", batch_index, len(records), namespace)

    return committed
