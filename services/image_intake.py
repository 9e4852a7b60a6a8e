"""Image intake service.

Turns the bytes of a user-selected file into an `UploadedImage`: the base64
content sent to the analysis model and the declared media type. Intake is
local and runs to completion before any analysis starts; anything it rejects
never reaches the network. The work is CPU bound, so the workflow runs it in
a worker thread rather than on the event loop.

Example:
    intake = ImageIntake(max_bytes=20 * 1024 * 1024)
    image = intake.intake(raw, content_type="image/png", filename="photo.png")
"""
from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image

from models.image_models import UploadedImage
from services.errors import IntakeError
from utils.media_validation import (
    UNVERIFIABLE_IMAGE_TYPES,
    encode_base64,
    resolve_image_media_type,
)

LOGGER = logging.getLogger(__name__)


class ImageIntake:
    """Validate uploaded image bytes and build normalized payloads.

    Args:
        max_bytes: Largest accepted upload in bytes. `0` disables the limit.
    """

    def __init__(self, max_bytes: int = 0) -> None:
        if max_bytes < 0:
            raise ValueError("max_bytes must be non-negative.")
        self.max_bytes = max_bytes

    def intake(
        self,
        data: bytes,
        *,
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> UploadedImage:
        """Build an `UploadedImage` from raw upload bytes.

        Args:
            data: Raw bytes of the selected file.
            content_type: MIME type declared by the client.
            filename: Filename declared by the client, used when no content type is given.

        Returns:
            The immutable image payload.

        Raises:
            IntakeError: If the bytes are empty, too large, declared as an
                unsupported type, or cannot be decoded as an image.
        """
        if not data:
            raise IntakeError("Uploaded image is empty.")
        if self.max_bytes and len(data) > self.max_bytes:
            raise IntakeError(f"Uploaded image exceeds the {self.max_bytes} byte limit.")

        media_type = resolve_image_media_type(content_type, filename)
        if media_type not in UNVERIFIABLE_IMAGE_TYPES:
            self._verify_decodable(data)

        image = UploadedImage(
            binary_content=encode_base64(data),
            media_type=media_type,
            filename=filename,
            byte_size=len(data),
        )
        LOGGER.debug("Accepted %s upload %r (%d bytes)", media_type, filename, len(data))
        return image

    @staticmethod
    def _verify_decodable(data: bytes) -> None:
        """Raise IntakeError unless Pillow can fully decode the bytes.

        `verify()` checks structure only and leaves the image unusable, so the
        bytes are reopened and loaded to catch truncated pixel data.
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
            with Image.open(io.BytesIO(data)) as img:
                img.load()
        except Exception as exc:
            raise IntakeError("Decoded bytes are not a supported image format.") from exc
