"""Pinecone implementation of the vector-index abstraction."""

from __future__ import annotations

import logging
from typing import Any

from pinecone import Pinecone

from docchat_ingest.config import settings
from docchat_ingest.indexing.base import VectorIndexBase

logger = logging.getLogger(__name__)


class PineconeVectorIndex(VectorIndexBase):
    """Pinecone-backed index, partitioned by namespace.

    The client and index handle are created on first use and then shared
    by reference; they carry no per-call state.

    Parameters
    ----------
    index_name:
        Name of the Pinecone index.
    api_key:
        Pinecone API key.
    index:
        Pre-built ``Index`` handle; skips client construction when given.
    """

    def __init__(
        self,
        index_name: str = settings.pinecone_index_name,
        *,
        api_key: str = settings.pinecone_api_key.get_secret_value(),
        index: Any = None,
    ) -> None:
        super().__init__(index_name)
        self._api_key = api_key
        self._index = index

    @property
    def index(self) -> Any:
        if self._index is None:
            self._index = Pinecone(api_key=self._api_key).Index(self.index_name)
        return self._index

    # -- VectorIndexBase overrides --------------------------------------------

    def upsert(self, namespace: str, records: list[dict[str, Any]]) -> None:
        self.index.upsert(vectors=records, namespace=namespace)

    def health_check(self) -> bool:
        try:
            self.index.describe_index_stats()
            return True
        except Exception:
            logger.warning("Pinecone health-check failed", exc_info=True)
            return False

    def delete_namespace(self, namespace: str) -> None:
        self.index.delete(delete_all=True, namespace=namespace)
