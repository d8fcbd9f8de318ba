"""
Indexing — namespaced, batched writes into the vector index.

Public surface
--------------
- :class:`VectorIndexBase` — abstract backend (subclass for Qdrant, etc.).
- :class:`PineconeVectorIndex` — default Pinecone backend.
- :func:`chunked_upsert` — sequential, fail-fast batched upsert.
- :func:`iter_batches` — batch partitioning helper.
"""

from docchat_ingest.indexing.base import VectorIndexBase
from docchat_ingest.indexing.batching import chunked_upsert, iter_batches

__all__ = [
    "PineconeVectorIndex",
    "VectorIndexBase",
    "chunked_upsert",
    "iter_batches",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import PineconeVectorIndex to avoid pulling in pinecone at import time."""
    if name == "PineconeVectorIndex":
        from docchat_ingest.indexing.pinecone_index import PineconeVectorIndex

        return PineconeVectorIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
