"""Forensic verdict schema shared by the analysis client and the HTTP layer.

The remote model returns its verdict through a strict function call whose
parameters mirror `AnalysisResult`. The field set is stable: the result
presenter consumes it as a whole.
"""

from typing import List, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

Classification = Literal["real", "ai-generated", "manipulated"]

ArtifactCategory = Literal[
    "diffusion_artifacts",
    "lighting_inconsistency",
    "anatomical_error",
    "texture_anomaly",
    "text_rendering",
    "background_inconsistency",
    "noise_pattern",
    "compression_anomaly",
    "edit_boundary",
    "other",
]

CLASSIFICATIONS: List[str] = list(get_args(Classification))
ARTIFACT_CATEGORIES: List[str] = list(get_args(ArtifactCategory))


class DetectedArtifact(BaseModel):
    """A single forensic indicator spotted by the model."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: ArtifactCategory
    detail: str


class AnalysisResult(BaseModel):
    """Complete forensic verdict for one image."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    classification: Classification
    confidence: float = Field(ge=0.0, le=1.0)
    rationale: str = Field(min_length=1)
    artifacts: List[DetectedArtifact]
