"""Upload reading and image normalization helpers."""

from __future__ import annotations

from io import BytesIO

from fastapi import UploadFile
from PIL import Image, ImageOps, UnidentifiedImageError

JPEG_CONTENT_TYPE = "image/jpeg"
JPEG_EXTENSION = ".jpg"
JPEG_QUALITY = 85
MAX_IMAGE_DIMENSION = 2048
READ_CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(ValueError):
    """Raised when an upload exceeds the configured byte limit."""


async def read_upload_file(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload into memory, refusing anything over ``max_bytes``."""
    buffer = bytearray()
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise UploadTooLargeError(f"Upload exceeds {max_bytes} bytes")
    if not buffer:
        raise ValueError("Uploaded file is empty")
    return bytes(buffer)


def process_image_bytes(data: bytes) -> tuple[bytes, str]:
    """Decode, orient, downscale and re-encode an image as JPEG."""
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            normalized = ImageOps.exif_transpose(image)
            if normalized.mode != "RGB":
                normalized = normalized.convert("RGB")
            normalized.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION))
            output = BytesIO()
            normalized.save(output, format="JPEG", quality=JPEG_QUALITY, optimize=True)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise ValueError("Uploaded file is not a valid image") from exc
    return output.getvalue(), JPEG_CONTENT_TYPE
