"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Ingestion settings, populated from env vars or .env file."""

    # Embedding service
    openai_api_key: SecretStr = Field(default=SecretStr(""), description="API key for the embedding service")
    embedding_model: str = Field(default="text-embedding-ada-002", description="Embedding model identifier")
    embedding_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible API; '/embeddings' is appended.",
    )
    embedding_timeout: float = 60.0
    embedding_dimensions: int | None = Field(
        default=None,
        description="Expected vector size. Responses of any other size are rejected when set.",
    )
    embedding_concurrency: int = Field(default=8, ge=1, description="Max in-flight embedding calls")

    # Object storage
    s3_bucket_name: str = ""
    s3_region: str = "us-east-1"
    s3_access_key_id: str = ""
    s3_secret_access_key: SecretStr = SecretStr("")
    download_dir: str = Field(default="/tmp", description="Where fetched documents are materialised")

    # Vector index
    pinecone_api_key: SecretStr = SecretStr("")
    pinecone_index_name: str = "pdf-chats"

    # Chunking / batching
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    max_segment_bytes: int = Field(default=36_000, gt=0)
    upsert_batch_size: int = Field(default=10, ge=1)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
