"""
Object storage for uploaded images: named buckets, keys, public URLs.
Backends: local folder (served by this app under /storage) or any S3-compatible service (S3, R2, MinIO).
"""
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta.json"


class StorageError(Exception):
    """Raised by a backend when an object operation is rejected."""


@dataclass
class StoredObject:
    path: Path
    content_type: str
    cache_control: str | None


class ObjectStorage(Protocol):
    def upload(self, bucket: str, key: str, data: bytes, content_type: str | None, cache_control: str | None) -> None: ...

    def get_public_url(self, bucket: str, key: str) -> str: ...

    def remove(self, bucket: str, key: str) -> None: ...


def storage_key(original_filename: str | None, prefix: str = "") -> str:
    """
    Unique key from the current timestamp + lower-cased extension of the original filename.
    e.g. ("Banner.JPG", "hero-") -> "hero-1718000000123456.jpg". No dot in the name -> no suffix.
    """
    stamp = time.time_ns() // 1000
    name = original_filename or ""
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return f"{prefix}{stamp}.{ext}" if ext else f"{prefix}{stamp}"


def _check_key(key: str) -> None:
    if not key or key.startswith("/") or "\\" in key or any(part in ("", ".", "..") for part in key.split("/")):
        raise StorageError(f"Invalid object key: {key!r}")


class LocalObjectStorage:
    """Buckets are folders under root. Refuses to overwrite an existing key."""

    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _bucket_dir(self, bucket: str) -> Path:
        _check_key(bucket)
        return self.root / bucket

    def _path(self, bucket: str, key: str) -> Path:
        _check_key(key)
        return self._bucket_dir(bucket) / key

    def upload(self, bucket: str, key: str, data: bytes, content_type: str | None, cache_control: str | None) -> None:
        path = self._path(bucket, key)
        if path.exists():
            raise StorageError(f"Object already exists: {bucket}/{key}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            meta = {"content_type": content_type or "application/octet-stream", "cache_control": cache_control}
            path.with_name(path.name + META_SUFFIX).write_text(json.dumps(meta))
        except OSError as e:
            raise StorageError(f"Failed to write {bucket}/{key}: {e}") from e
        logger.info("Stored %s/%s (%d bytes)", bucket, key, len(data))

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{key}"

    def open(self, bucket: str, key: str) -> StoredObject | None:
        """Resolve a stored object for serving. None if missing or the key escapes the bucket."""
        try:
            base = self._bucket_dir(bucket).resolve()
            full = (base / key).resolve()
            full.relative_to(base)
        except (StorageError, ValueError, OSError):
            return None
        if not full.is_file() or full.name.endswith(META_SUFFIX):
            return None
        content_type, cache_control = "application/octet-stream", None
        meta_path = full.with_name(full.name + META_SUFFIX)
        if meta_path.is_file():
            try:
                meta = json.loads(meta_path.read_text())
            except (ValueError, OSError) as e:
                logger.warning("Ignoring unreadable metadata %s: %s", meta_path, e)
                meta = {}
            if isinstance(meta, dict):
                content_type = meta.get("content_type") or content_type
                cache_control = meta.get("cache_control")
        return StoredObject(path=full, content_type=content_type, cache_control=cache_control)

    def remove(self, bucket: str, key: str) -> None:
        path = self._path(bucket, key)
        try:
            path.unlink(missing_ok=True)
            path.with_name(path.name + META_SUFFIX).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {bucket}/{key}: {e}") from e


class S3ObjectStorage:
    """S3-compatible storage (AWS S3, Cloudflare R2, MinIO). Buckets must exist and be publicly readable."""

    def __init__(self, settings: Settings, client=None):
        self.public_url = (settings.s3_public_url or settings.s3_endpoint_url).rstrip("/")
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url or None,
            aws_access_key_id=settings.s3_access_key_id or None,
            aws_secret_access_key=settings.s3_secret_access_key or None,
            region_name=settings.s3_region,
            config=BotoConfig(s3={"addressing_style": "path"}),
        )

    def upload(self, bucket: str, key: str, data: bytes, content_type: str | None, cache_control: str | None) -> None:
        extra = {}
        if cache_control:
            extra["CacheControl"] = cache_control
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
                **extra,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload {bucket}/{key}: {e}") from e
        logger.info("Uploaded %s/%s to S3 (%d bytes)", bucket, key, len(data))

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_url}/{bucket}/{key}"

    def remove(self, bucket: str, key: str) -> None:
        try:
            self.client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to remove {bucket}/{key}: {e}") from e


def local_storage_dir() -> Path:
    settings = get_settings()
    if settings.storage_dir:
        return Path(settings.storage_dir)
    return Path(__file__).resolve().parent.parent.parent / "uploads" / "storage"


_storage: ObjectStorage | None = None


def get_storage() -> ObjectStorage:
    """Lazy singleton for the configured backend. Overridden in tests via dependency_overrides."""
    global _storage
    if _storage is not None:
        return _storage
    settings = get_settings()
    backend = settings.storage_backend.strip().lower()
    if backend == "s3":
        _storage = S3ObjectStorage(settings)
    elif backend == "local":
        _storage = LocalObjectStorage(local_storage_dir(), settings.public_base_url)
    else:
        raise ValueError(f"Unknown storage_backend: {settings.storage_backend!r} (expected 'local' or 's3')")
    logger.info("Object storage backend: %s", backend)
    return _storage
