"""Media persistence for post images and avatars.

Files are addressed by a relative URL such as ``/uploads/<name>.jpg``. The
``local`` backend writes under ``settings.media_root``; the ``minio`` backend
stores the same path (minus the leading slash) as an object key.
"""

from __future__ import annotations

import time
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from uuid import uuid4

from minio import Minio
from minio.error import S3Error

from core import settings

AVATARS_FOLDER = "avatars"
UPLOADS_FOLDER = "uploads"
MEDIA_FOLDERS = frozenset({AVATARS_FOLDER, UPLOADS_FOLDER})
MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "NoSuchObject", "ResourceNotFound"})


@lru_cache
def get_minio_client() -> Minio:
    """Return a cached MinIO client configured from settings."""
    return Minio(
        settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
    )


def ensure_bucket(client: Minio | None = None) -> None:
    """Ensure the configured bucket exists."""
    client = client or get_minio_client()
    bucket_name = settings.minio_bucket

    if client.bucket_exists(bucket_name):  # pragma: no cover - network call
        return

    try:
        client.make_bucket(bucket_name)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - handle race conditions
        allowed_codes = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}
        if exc.code not in allowed_codes:
            raise


def delete_object(object_key: str, client: Minio | None = None) -> None:
    """Delete an object from the configured bucket when it exists."""
    client = client or get_minio_client()
    try:
        client.remove_object(settings.minio_bucket, object_key)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - network call
        if exc.code not in MISSING_OBJECT_CODES:
            raise


def build_media_filename(extension: str = ".jpg") -> str:
    """Timestamp plus random suffix, so concurrent uploads never collide."""
    return f"{int(time.time() * 1000)}-{uuid4().hex[:12]}{extension}"


def media_url(folder: str, filename: str) -> str:
    if folder not in MEDIA_FOLDERS:
        raise ValueError(f"Unknown media folder: {folder}")
    return f"/{folder}/{filename}"


def object_key_from_url(url: str | None) -> str | None:
    """Map a stored media URL back to its object key, or None if it is external."""
    if not url or not url.startswith("/"):
        return None
    folder, _, filename = url.lstrip("/").partition("/")
    if folder not in MEDIA_FOLDERS or not filename or "/" in filename or filename in {".", ".."}:
        return None
    return f"{folder}/{filename}"


def _local_path(object_key: str) -> Path:
    return Path(settings.media_root) / object_key


def save_media(
    folder: str,
    data: bytes,
    *,
    content_type: str,
    extension: str = ".jpg",
) -> str:
    """Persist ``data`` under ``folder`` and return its relative URL."""
    url = media_url(folder, build_media_filename(extension))
    object_key = url.lstrip("/")

    if settings.storage_backend == "minio":
        client = get_minio_client()
        ensure_bucket(client)
        client.put_object(
            settings.minio_bucket,
            object_key,
            data=BytesIO(data),
            length=len(data),
            content_type=content_type,
        )
        return url

    path = _local_path(object_key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return url


def delete_media(url: str | None) -> bool:
    """Remove the file behind a stored media URL. Returns False for external URLs."""
    object_key = object_key_from_url(url)
    if object_key is None:
        return False

    if settings.storage_backend == "minio":
        delete_object(object_key)
        return True

    _local_path(object_key).unlink(missing_ok=True)
    return True
