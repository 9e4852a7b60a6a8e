"""
Tests for services/image_intake.py and utils/media_validation.py
"""
import base64
import io
import random
from dataclasses import fields

import pytest
from PIL import Image

from services.errors import IntakeError
from services.image_intake import ImageIntake
from utils.media_validation import normalize_media_type, resolve_image_media_type


@pytest.fixture
def noisy_jpeg_bytes():
    rng = random.Random(7)
    img = Image.frombytes("RGB", (256, 256), bytes(rng.getrandbits(8) for _ in range(256 * 256 * 3)))
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def test_round_trip_reproduces_original_bytes(jpeg_bytes):
    image = ImageIntake().intake(jpeg_bytes, content_type="image/jpeg", filename="photo.jpg")
    assert base64.b64decode(image.binary_content) == jpeg_bytes
    assert image.decoded_bytes() == jpeg_bytes
    assert image.byte_size == len(jpeg_bytes)
    assert image.filename == "photo.jpg"


def test_preview_reference_encodes_same_bytes(png_bytes):
    image = ImageIntake().intake(png_bytes, content_type="image/png")
    prefix = "data:image/png;base64,"
    assert image.preview_reference.startswith(prefix)
    assert base64.b64decode(image.preview_reference[len(prefix):]) == png_bytes


def test_identical_bytes_yield_identical_payloads(png_bytes):
    intake = ImageIntake()
    first = intake.intake(png_bytes, content_type="image/png")
    second = intake.intake(png_bytes, content_type="image/png")
    assert first.binary_content == second.binary_content
    assert first.media_type == second.media_type


def test_media_type_comes_from_declaration_not_content(png_bytes):
    # PNG bytes declared as JPEG keep the declared type.
    image = ImageIntake().intake(png_bytes, content_type="image/jpeg")
    assert image.media_type == "image/jpeg"


def test_media_type_parameters_and_aliases_are_normalized(jpeg_bytes):
    image = ImageIntake().intake(jpeg_bytes, content_type="Image/JPG; charset=binary")
    assert image.media_type == "image/jpeg"


def test_extension_fallback_when_type_missing(png_bytes):
    image = ImageIntake().intake(png_bytes, content_type="application/octet-stream", filename="scan.PNG")
    assert image.media_type == "image/png"


def test_uploaded_image_is_immutable(png_bytes):
    image = ImageIntake().intake(png_bytes, content_type="image/png")
    with pytest.raises(AttributeError):
        image.media_type = "image/gif"


def test_repr_omits_payloads(png_bytes):
    image = ImageIntake().intake(png_bytes, content_type="image/png")
    assert image.binary_content not in repr(image)


@pytest.mark.parametrize(
    "data, content_type, filename",
    [
        (b"", "image/png", None),
        (b"plain text", "text/plain", "notes.txt"),
        (b"not really a jpeg", "image/jpeg", "photo.jpg"),
        (b"mystery", None, "archive.zip"),
        (b"mystery", None, None),
    ],
)
def test_rejections_raise_intake_error(data, content_type, filename):
    with pytest.raises(IntakeError):
        ImageIntake().intake(data, content_type=content_type, filename=filename)


def test_size_limit(png_bytes):
    with pytest.raises(IntakeError, match="byte limit"):
        ImageIntake(max_bytes=len(png_bytes) - 1).intake(png_bytes, content_type="image/png")
    assert ImageIntake(max_bytes=len(png_bytes)).intake(png_bytes, content_type="image/png")


def test_negative_size_limit_rejected():
    with pytest.raises(ValueError):
        ImageIntake(max_bytes=-1)


def test_heic_accepted_on_declaration():
    image = ImageIntake().intake(b"\x00\x00\x00\x18ftypheic", content_type="image/heic", filename="IMG_0001.HEIC")
    assert image.media_type == "image/heic"


def test_normalize_media_type():
    assert normalize_media_type(None) == ""
    assert normalize_media_type(" IMAGE/PNG ;q=1") == "image/png"
    assert normalize_media_type("image/x-png") == "image/png"


def test_resolve_rejects_unsupported_declaration():
    with pytest.raises(IntakeError, match="Unsupported image content type"):
        resolve_image_media_type("image/tiff", "scan.png")


def test_preview_reference_is_derived_not_stored(png_bytes):
    image = ImageIntake().intake(png_bytes, content_type="image/png")
    assert "preview_reference" not in {f.name for f in fields(image)}
    assert image.preview_reference == f"data:image/png;base64,{image.binary_content}"


def test_complete_noisy_jpeg_is_accepted(noisy_jpeg_bytes):
    image = ImageIntake().intake(noisy_jpeg_bytes, content_type="image/jpeg")
    assert image.byte_size == len(noisy_jpeg_bytes)


def test_truncated_jpeg_is_rejected(noisy_jpeg_bytes):
    truncated = noisy_jpeg_bytes[: len(noisy_jpeg_bytes) // 2]
    with pytest.raises(IntakeError, match="not a supported image"):
        ImageIntake().intake(truncated, content_type="image/jpeg", filename="photo.jpg")
