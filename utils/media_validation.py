"""Validation helpers for uploaded image content."""

import base64
import os
from typing import Optional

from fastapi import UploadFile

from services.errors import IntakeError

ALLOWED_IMAGE_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
}

# Stock Pillow cannot decode these; they are accepted on declaration alone.
UNVERIFIABLE_IMAGE_TYPES = {"image/heic", "image/heif"}

MEDIA_TYPE_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/x-png": "image/png",
}

EXTENSION_MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


def normalize_media_type(content_type: Optional[str]) -> str:
    """Lower-case a MIME type, strip its parameters and resolve common aliases."""
    mime = (content_type or "").lower().split(";", 1)[0].strip()
    return MEDIA_TYPE_ALIASES.get(mime, mime)


def resolve_image_media_type(content_type: Optional[str], filename: Optional[str]) -> str:
    """Return the declared image MIME type of an upload.

    The declared content type wins. Only when the client sent none (or a
    generic binary type) is the filename extension consulted. The bytes
    themselves are never sniffed.

    Raises:
        IntakeError: If the declaration is not one of the accepted image types.
    """
    mime = normalize_media_type(content_type)
    if mime not in GENERIC_CONTENT_TYPES:
        if mime not in ALLOWED_IMAGE_TYPES:
            raise IntakeError(f"Unsupported image content type: {content_type}")
        return mime

    suffix = os.path.splitext(filename or "")[1].lower()
    if suffix not in EXTENSION_MEDIA_TYPES:
        raise IntakeError("Unsupported or missing image content type.")
    return EXTENSION_MEDIA_TYPES[suffix]


def encode_base64(raw: bytes) -> str:
    """Return the base64 text form of raw bytes."""
    return base64.b64encode(raw).decode("ascii")


def to_data_url(binary_content: str, media_type: str) -> str:
    """Wrap base64 content in a data URL for the given media type."""
    return f"data:{media_type};base64,{binary_content}"


async def read_image_bytes(upload: UploadFile) -> bytes:
    """Read the raw bytes of an uploaded image file."""
    try:
        return await upload.read()
    except Exception as exc:
        raise IntakeError("Unable to read uploaded image.") from exc
