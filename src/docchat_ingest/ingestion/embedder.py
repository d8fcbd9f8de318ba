"""Embedding client for an OpenAI-compatible ``/embeddings`` endpoint.

One :class:`Embedder` is meant to be shared by every concurrent embedding
task of a run: it holds a single lazily created ``httpx.AsyncClient`` and
no per-call state.  Concurrency limits are applied by the caller.
"""

from __future__ import annotations

import logging

import httpx

from docchat_ingest.config import settings
from docchat_ingest.errors import EmbeddingError

logger = logging.getLogger(__name__)


class Embedder:
    """Asynchronous text → vector client.

    Parameters
    ----------
    api_key:
        Bearer token.  Defaults to ``settings.openai_api_key``.
    model:
        Embedding model.  Defaults to ``settings.embedding_model``.
    base_url:
        API root; ``/embeddings`` is appended.
    timeout:
        HTTP timeout for each request, in seconds.
    dimensions:
        Expected vector length.  When set, any other length is an error.
    transport:
        Optional ``httpx`` transport, mainly for tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        dimensions: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.embedding_model
        self.base_url = (base_url or settings.embedding_base_url).rstrip("/")
        self.timeout = timeout or settings.embedding_timeout
        self.dimensions = dimensions if dimensions is not None else settings.embedding_dimensions
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.api_key}"},
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client, if one was opened."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        """Return the embedding of *text* exactly as given.

        Raises
        ------
        EmbeddingError
            On transport failure, a non-2xx status, or a malformed response.
        """
        payload = {"model": self.model, "input": text}
        try:
            response = await self.client.post("/embeddings", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            logger.error(
                "Embedding request failed (%s): chars=%d, error=%s",
                type(exc).__name__,
                len(text),
                exc,
            )
            raise EmbeddingError(f"Embedding generation failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise EmbeddingError("Embedding response is not valid JSON.") from exc

        return self._extract_embedding(data)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _extract_embedding(self, data: object) -> list[float]:
        """Validate ``{"data": [{"embedding": [...]}]}`` and return the vector."""
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list) or not records:
            raise EmbeddingError("'data' field must be a non-empty list.")

        record = records[0]
        if not isinstance(record, dict) or "embedding" not in record:
            raise EmbeddingError(f"Malformed embedding record: {record!r}")

        emb = record["embedding"]
        if not isinstance(emb, list) or not emb or not all(
            isinstance(x, (float, int)) and not isinstance(x, bool) for x in emb
        ):
            raise EmbeddingError("Invalid embedding vector: must be a non-empty float list.")

        if self.dimensions is not None and len(emb) != self.dimensions:
            raise EmbeddingError(f"Expected {self.dimensions} dimensions, got {len(emb)}.")

        return [float(x) for x in emb]
