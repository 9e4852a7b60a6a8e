"""Schema definitions for the image forensics reporting tool."""

from typing import Any, Dict

from models.analysis_models import ARTIFACT_CATEGORIES, CLASSIFICATIONS

FUNCTION_NAME = "report_image_forensics"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": (
        "Return the authenticity classification, confidence, rationale and detected artifacts for the image."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "classification": {
                "type": "string",
                "description": "Whether the image is a real capture, AI-generated, or a manipulated photograph.",
                "enum": CLASSIFICATIONS,
            },
            "confidence": {
                "type": "number",
                "description": "Confidence in the classification, from 0.0 to 1.0.",
            },
            "rationale": {
                "type": "string",
                "description": "Concise forensic reasoning supporting the classification.",
            },
            "artifacts": {
                "type": "array",
                "description": "Forensic indicators found in the image. Empty when none were found.",
                "items": {
                    "type": "object",
                    "properties": {
                        "category": {"type": "string", "enum": ARTIFACT_CATEGORIES},
                        "detail": {
                            "type": "string",
                            "description": "Where the artifact appears and what it looks like.",
                        },
                    },
                    "required": ["category", "detail"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["classification", "confidence", "rationale", "artifacts"],
        "additionalProperties": False,
    },
    "strict": True,
}
