"""Blob fetchers — materialise a stored document as a local file.

Adding a new storage backend only requires subclassing
:class:`BlobFetcherBase` and implementing :meth:`~BlobFetcherBase.fetch`.
"""

from __future__ import annotations

import logging
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import closing
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from docchat_ingest.config import settings
from docchat_ingest.errors import FetchError

logger = logging.getLogger(__name__)


class BlobFetcherBase(ABC):
    """Backend-agnostic fetch interface."""

    @abstractmethod
    def fetch(self, key: str) -> Path:
        """Return a readable local path holding the bytes stored under *key*.

        Raises
        ------
        FetchError
            If the object does not exist or cannot be transferred.
        """
        ...

    def release(self, path: Path) -> None:
        """Give back a path returned by :meth:`fetch`.  No-op by default."""


class S3BlobFetcher(BlobFetcherBase):
    """Downloads objects from an S3 bucket into temporary files.

    Parameters
    ----------
    bucket:
        Bucket holding uploaded documents.
    region:
        AWS region of the bucket.
    access_key_id / secret_access_key:
        Explicit credentials.  When empty, boto3's default credential
        chain is used.
    download_dir:
        Directory downloads are written to.
    client:
        Pre-built S3 client; created lazily from the above when *None*.
    """

    def __init__(
        self,
        bucket: str = settings.s3_bucket_name,
        *,
        region: str = settings.s3_region,
        access_key_id: str = settings.s3_access_key_id,
        secret_access_key: str = settings.s3_secret_access_key.get_secret_value(),
        download_dir: str | Path = settings.download_dir,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self.download_dir = Path(download_dir)
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            credentials: dict[str, str] = {}
            if self._access_key_id and self._secret_access_key:
                credentials = {
                    "aws_access_key_id": self._access_key_id,
                    "aws_secret_access_key": self._secret_access_key,
                }
            self._client = boto3.client("s3", region_name=self.region, **credentials)
        return self._client

    def fetch(self, key: str) -> Path:
        if not self.bucket:
            raise FetchError("No S3 bucket configured", key=key)

        target = self.download_dir / f"pdf-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.pdf"
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            with closing(response["Body"]) as body:
                self.download_dir.mkdir(parents=True, exist_ok=True)
                with open(target, "wb") as fh:
                    for chunk in body.iter_chunks():
                        fh.write(chunk)
        except (ClientError, BotoCoreError, OSError) as exc:
            logger.error("Download of s3://%s/%s failed: %s", self.bucket, key, exc)
            target.unlink(missing_ok=True)
            raise FetchError(f"Could not download {key!r} from S3: {exc}", key=key) from exc

        logger.info("Downloaded s3://%s/%s to %s", self.bucket, key, target)
        return target

    def release(self, path: Path) -> None:
        path.unlink(missing_ok=True)


class LocalBlobFetcher(BlobFetcherBase):
    """Serves keys as paths relative to a local directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def fetch(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise FetchError(f"Key {key!r} escapes {self.root}", key=key)
        if not path.is_file():
            raise FetchError(f"No object stored under {key!r}", key=key)
        return path
