"""Business logic services."""

from .images import (
    JPEG_CONTENT_TYPE,
    MAX_IMAGE_DIMENSION,
    UploadTooLargeError,
    process_image_bytes,
    read_upload_file,
)
from .storage import (
    AVATARS_FOLDER,
    UPLOADS_FOLDER,
    delete_media,
    delete_object,
    ensure_bucket,
    get_minio_client,
    save_media,
)

__all__ = [
    "get_minio_client",
    "ensure_bucket",
    "delete_object",
    "save_media",
    "delete_media",
    "AVATARS_FOLDER",
    "UPLOADS_FOLDER",
    "process_image_bytes",
    "read_upload_file",
    "MAX_IMAGE_DIMENSION",
    "JPEG_CONTENT_TYPE",
    "UploadTooLargeError",
]
