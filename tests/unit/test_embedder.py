"""Unit tests for the embedding client, using ``httpx.MockTransport``."""

from __future__ import annotations

import json

import httpx
import pytest

from docchat_ingest.errors import EmbeddingError
from docchat_ingest.ingestion.embedder import Embedder


def _embedder(handler, **kwargs) -> Embedder:
    return Embedder(
        api_key="sk-test",
        model="text-embedding-ada-002",
        base_url="https://api.example.com/v1",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_embed_returns_float_vector() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [{"embedding": [1, 0.5, -2]}]})

    embedder = _embedder(handler)
    try:
        vector = await embedder.embed("hello\nworld")
    finally:
        await embedder.aclose()

    assert vector == [1.0, 0.5, -2.0]
    request = seen[0]
    assert request.url == "https://api.example.com/v1/embeddings"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert json.loads(request.content) == {"model": "text-embedding-ada-002", "input": "hello\nworld"}


@pytest.mark.asyncio
async def test_http_error_status_raises_embedding_error() -> None:
    embedder = _embedder(lambda request: httpx.Response(429, json={"error": "rate limited"}))
    with pytest.raises(EmbeddingError, match="HTTPStatusError"):
        await embedder.embed("text")
    await embedder.aclose()


@pytest.mark.asyncio
async def test_transport_error_raises_embedding_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    embedder = _embedder(handler)
    with pytest.raises(EmbeddingError) as exc_info:
        await embedder.embed("text")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    await embedder.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"nope": []},
        {"data": []},
        {"data": [{"vector": [1.0]}]},
        {"data": [{"embedding": ["a", "b"]}]},
        {"data": [{"embedding": []}]},
    ],
)
async def test_malformed_response_raises_embedding_error(body: dict) -> None:
    embedder = _embedder(lambda request: httpx.Response(200, json=body))
    with pytest.raises(EmbeddingError):
        await embedder.embed("text")
    await embedder.aclose()


@pytest.mark.asyncio
async def test_non_json_response_raises_embedding_error() -> None:
    embedder = _embedder(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(EmbeddingError, match="JSON"):
        await embedder.embed("text")
    await embedder.aclose()


@pytest.mark.asyncio
async def test_dimension_mismatch_raises_embedding_error() -> None:
    embedder = _embedder(
        lambda request: httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2]}]}),
        dimensions=1536,
    )
    with pytest.raises(EmbeddingError, match="1536"):
        await embedder.embed("text")
    await embedder.aclose()


@pytest.mark.asyncio
async def test_client_is_shared_across_calls() -> None:
    embedder = _embedder(lambda request: httpx.Response(200, json={"data": [{"embedding": [0.1]}]}))
    first = embedder.client
    await embedder.embed("a")
    await embedder.embed("b")
    assert embedder.client is first
    await embedder.aclose()
    assert embedder._client is None
