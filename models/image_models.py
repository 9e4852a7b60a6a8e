from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class UploadedImage:
    """Normalized payload produced for one user image selection.

    Attributes:
        binary_content: Base64 text of the raw image bytes.
        media_type: Declared MIME type of the source file (normalized).
        filename: Filename declared by the client, if any.
        byte_size: Length of the decoded image bytes.
    """

    binary_content: str = field(repr=False)
    media_type: str
    filename: Optional[str] = None
    byte_size: int = 0

    @property
    def preview_reference(self) -> str:
        """Data URL over the same bytes, built on demand for redisplay."""
        return f"data:{self.media_type};base64,{self.binary_content}"

    def decoded_bytes(self) -> bytes:
        """Return the original image bytes."""
        return base64.b64decode(self.binary_content)
