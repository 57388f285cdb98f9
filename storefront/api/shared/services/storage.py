"""Image upload storage.

Uploaded product, banner and avatar images are written either to the local
filesystem (served by the API under ``/uploads``) or to an S3-compatible
bucket. Both backends return the public URL of the stored object, and can
delete objects given that URL.

Usage:
    storage = get_storage()
    url = storage.save(content, folder="banners", filename="banner-1700000000-ab12cd34.png")
    storage.delete(url)
"""

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from fastapi import HTTPException

from storefront.config import StorageConfig, get_config
from storefront.logging_config import get_logger

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = get_logger(__name__)

# MIME type -> file extension
ALLOWED_IMAGE_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

# Avatars additionally accept GIF
AVATAR_IMAGE_TYPES: dict[str, str] = {**ALLOWED_IMAGE_TYPES, "image/gif": "gif"}

MB = 1024 * 1024


@dataclass
class ImageUpload:
    """An uploaded image that passed validation."""

    content: bytes
    content_type: str
    extension: str


def validate_image(
    content: bytes,
    content_type: str | None,
    max_size_mb: int,
    allowed_types: dict[str, str] = ALLOWED_IMAGE_TYPES,
) -> ImageUpload:
    """Check an upload's type and size.

    Args:
        content: Raw file bytes
        content_type: Declared MIME type
        max_size_mb: Maximum size in megabytes
        allowed_types: Accepted MIME types mapped to extensions

    Returns:
        ImageUpload with the extension to store it under

    Raises:
        HTTPException: 400 if the type is not allowed, the file is empty,
            or it exceeds the size limit
    """
    content_type = (content_type or "").lower()
    if content_type not in allowed_types:
        allowed = ", ".join(sorted({ext.upper() for ext in allowed_types.values()}))
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Only {allowed} are allowed",
        )

    if not content:
        raise HTTPException(status_code=400, detail="File is empty")

    if len(content) > max_size_mb * MB:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {max_size_mb}MB",
        )

    return ImageUpload(
        content=content,
        content_type=content_type,
        extension=allowed_types[content_type],
    )


def generate_filename(prefix: str, extension: str) -> str:
    """Build a collision-resistant name like ``banner-1700000000000-9f2c1a7b.png``."""
    timestamp = int(time.time() * 1000)
    return f"{prefix}-{timestamp}-{secrets.token_hex(4)}.{extension}"


class Storage(Protocol):
    def save(self, content: bytes, folder: str, filename: str, content_type: str) -> str: ...

    def delete(self, url: str) -> bool: ...

    def list_urls(self, folder: str) -> list[str]: ...

    def owns(self, url: str) -> bool: ...


class LocalStorage:
    """Store uploads under a local directory served at ``url_prefix``."""

    def __init__(self, root: str | Path, url_prefix: str = "/uploads"):
        self.root = Path(root).resolve()
        self.url_prefix = url_prefix.rstrip("/")

    def _path_for_url(self, url: str) -> Path:
        if not self.owns(url):
            raise HTTPException(status_code=400, detail="Invalid upload path")

        relative = url[len(self.url_prefix) + 1:]
        path = (self.root / relative).resolve()
        if not path.is_relative_to(self.root):
            raise HTTPException(status_code=400, detail="Invalid upload path")
        return path

    def owns(self, url: str) -> bool:
        return url.startswith(f"{self.url_prefix}/")

    def save(self, content: bytes, folder: str, filename: str, content_type: str) -> str:
        directory = self.root / folder
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(content)

        url = f"{self.url_prefix}/{folder}/{filename}"
        logger.info("Stored upload", extra={"url": url, "size": len(content)})
        return url

    def delete(self, url: str) -> bool:
        path = self._path_for_url(url)
        if not path.is_file():
            return False
        path.unlink()
        logger.info("Deleted upload", extra={"url": url})
        return True

    def list_urls(self, folder: str) -> list[str]:
        directory = self.root / folder
        if not directory.is_dir():
            return []
        return sorted(
            f"{self.url_prefix}/{folder}/{path.name}"
            for path in directory.iterdir()
            if path.is_file()
        )


class S3Storage:
    """Store uploads in an S3-compatible bucket (AWS S3, Cloudflare R2, MinIO)."""

    def __init__(self, config: StorageConfig, client: "S3Client | None" = None):
        if not config.s3_bucket:
            raise ValueError("S3 storage requires a bucket name")
        self.bucket = config.s3_bucket
        self.public_url = (
            config.s3_public_url or f"https://{config.s3_bucket}.s3.{config.s3_region}.amazonaws.com"
        ).rstrip("/")
        self._client = client or _create_s3_client(config)

    def _key_for_url(self, url: str) -> str:
        if not self.owns(url):
            raise HTTPException(status_code=400, detail="Invalid upload path")
        key = url[len(self.public_url) + 1:]
        if ".." in key.split("/"):
            raise HTTPException(status_code=400, detail="Invalid upload path")
        return key

    def owns(self, url: str) -> bool:
        return url.startswith(f"{self.public_url}/")

    def save(self, content: bytes, folder: str, filename: str, content_type: str) -> str:
        key = f"{folder}/{filename}"
        self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType=content_type,
        )
        url = f"{self.public_url}/{key}"
        logger.info("Stored upload in bucket", extra={"bucket": self.bucket, "key": key})
        return url

    def delete(self, url: str) -> bool:
        key = self._key_for_url(url)
        self._client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("Deleted upload from bucket", extra={"bucket": self.bucket, "key": key})
        return True

    def list_urls(self, folder: str) -> list[str]:
        paginator = self._client.get_paginator("list_objects_v2")
        urls: list[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=f"{folder}/"):
            for obj in page.get("Contents", []):
                urls.append(f"{self.public_url}/{obj['Key']}")
        return sorted(urls)


def _create_s3_client(config: StorageConfig) -> "S3Client":
    import boto3

    client_kwargs: dict[str, Any] = {
        "service_name": "s3",
        "region_name": config.s3_region,
    }
    if config.s3_access_key_id and config.s3_secret_access_key:
        client_kwargs["aws_access_key_id"] = config.s3_access_key_id
        client_kwargs["aws_secret_access_key"] = config.s3_secret_access_key
    if config.s3_endpoint_url:
        client_kwargs["endpoint_url"] = config.s3_endpoint_url

    return boto3.client(**client_kwargs)


def discard_upload(storage: Storage, url: str | None) -> bool:
    """Delete a stored upload if it belongs to this storage.

    Used when the record referencing the file is removed. A failed delete
    leaves an orphaned file behind (see ``storefront cleanup-banners``), so
    it is logged rather than raised.

    Returns:
        True if a file was deleted
    """
    if not url or not storage.owns(url):
        return False
    try:
        return storage.delete(url)
    except Exception as e:
        logger.warning(f"Failed to delete upload {url}: {e}", exc_info=True)
        return False


_storage: Storage | None = None
_storage_lock = threading.Lock()


def create_storage(config: StorageConfig) -> Storage:
    if config.backend == "s3":
        return S3Storage(config)
    return LocalStorage(config.upload_dir, config.url_prefix)


def get_storage() -> Storage:
    """Get the process-wide storage backend (created on first use)."""
    global _storage

    if _storage is None:
        with _storage_lock:
            if _storage is None:
                _storage = create_storage(get_config().storage)
                logger.debug(f"Created {type(_storage).__name__} upload storage")
    return _storage
