"""Abstract base class for vector-index backends.

Adding a new backend (Qdrant, Weaviate, pgvector …) only requires
subclassing :class:`VectorIndexBase` and implementing the two abstract
methods.  Batching and failure accounting live in
:mod:`docchat_ingest.indexing.batching` and are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class VectorIndexBase(ABC):
    """Namespaced upsert interface over a single logical index.

    Parameters
    ----------
    index_name:
        Name of the index shared by every ingested document.
    """

    def __init__(self, index_name: str) -> None:
        self.index_name = index_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def upsert(self, namespace: str, records: list[dict[str, Any]]) -> None:
        """Write *records* into *namespace* in one remote call.

        Each record is an ``{"id", "values", "metadata"}`` mapping.  Existing
        ids are overwritten.  Implementations raise on any failure; the call
        is treated as all-or-nothing.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- optional overrides ---------------------------------------------------

    def delete_namespace(self, namespace: str) -> None:
        """Remove every vector in *namespace*.  Optional — raises by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support delete_namespace")
