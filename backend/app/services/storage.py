"""Object storage for uploaded resume files.

Two backends share one interface: a local directory (default, used in
development and tests) and an S3 bucket. Routes only see ``StorageBackend``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class ObjectNotFoundError(StorageError):
    pass


@dataclass
class StoredObject:
    key: str
    url: str | None
    size: int


class StorageBackend:
    name = "abstract"

    def put(self, key: str, data: bytes, content_type: str, metadata: dict[str, str] | None = None) -> StoredObject:
        raise NotImplementedError

    def read(self, key: str) -> bytes:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def presigned_url(self, key: str, expires_in: int = 3600) -> str | None:
        return None

    def health(self) -> dict[str, Any]:
        raise NotImplementedError


class LocalFileStorage(StorageBackend):
    name = "local"

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        target = (self.root / key).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(f"Key escapes storage root: {key}")
        return target

    def put(self, key: str, data: bytes, content_type: str, metadata: dict[str, str] | None = None) -> StoredObject:
        target = self._path_for(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return StoredObject(key=key, url=None, size=len(data))

    def read(self, key: str) -> bytes:
        target = self._path_for(key)
        if not target.is_file():
            raise ObjectNotFoundError(key)
        return target.read_bytes()

    def delete(self, key: str) -> bool:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except (OSError, StorageError) as exc:
            logger.error("Local delete failed for %s: %s", key, exc)
            return False
        return True

    def health(self) -> dict[str, Any]:
        return {"status": "healthy" if self.root.is_dir() else "unavailable", "backend": self.name}


class S3Storage(StorageBackend):
    name = "s3"

    def __init__(self, bucket: str, region: str, client=None) -> None:
        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client("s3", region_name=region)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def put(self, key: str, data: bytes, content_type: str, metadata: dict[str, str] | None = None) -> StoredObject:
        object_metadata = dict(metadata or {})
        object_metadata["upload-date"] = datetime.now(timezone.utc).isoformat()
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata=object_metadata,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 upload failed: {exc}") from exc
        return StoredObject(key=key, url=self.public_url(key), size=len(data))

    def read(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise ObjectNotFoundError(key) from exc
            raise StorageError(f"S3 read failed: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"S3 read failed: {exc}") from exc
        return response["Body"].read()

    def delete(self, key: str) -> bool:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 delete failed for %s: %s", key, exc)
            return False
        return True

    def presigned_url(self, key: str, expires_in: int = 3600) -> str | None:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to generate signed URL: {exc}") from exc

    def health(self) -> dict[str, Any]:
        started = time.perf_counter()
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError) as exc:
            return {"status": "unhealthy", "backend": self.name, "bucket": self.bucket, "error": str(exc)}
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return {
            "status": "healthy",
            "backend": self.name,
            "bucket": self.bucket,
            "region": self.region,
            "responseTime": f"{elapsed_ms}ms",
        }


def build_storage(backend: str | None = None) -> StorageBackend:
    backend = (backend or settings.storage_backend).lower()
    if backend == "s3":
        return S3Storage(bucket=settings.s3_bucket, region=settings.aws_region)
    if backend == "local":
        return LocalFileStorage(settings.upload_dir)
    raise ValueError(f"Unknown storage backend: {backend}")


@lru_cache(maxsize=1)
def get_storage() -> StorageBackend:
    storage = build_storage()
    logger.info("Using %s resume storage", storage.name)
    return storage
