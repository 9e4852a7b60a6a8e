"""Utilities to build multimodal input payloads for the Responses API."""

from typing import Any, Dict, List

from utils.media_validation import to_data_url


def to_image_data_url(binary_content: str, media_type: str) -> str:
    """Convert base64 image content into a data URL suitable for vision input."""
    return to_data_url(binary_content, media_type)


def build_inputs(system_prompt: str, user_prompt: str, *, image_url: str) -> List[Dict[str, Any]]:
    """Build the Responses API input array: instructions first, then the image."""
    return [
        {
            "type": "message",
            "role": "system",
            "content": [{"type": "input_text", "text": system_prompt}],
        },
        {"type": "message", "role": "user", "content": [{"type": "input_text", "text": user_prompt}]},
        {
            "type": "message",
            "role": "user",
            "content": [{"type": "input_image", "image_url": image_url, "detail": "high"}],
        },
    ]
