"""Session domain models for the image analysis workflow.

A session is one of four variants. Each variant carries exactly the fields
that are meaningful in its state, so a result can never coexist with an idle
session or an error message with a completed one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from models.analysis_models import AnalysisResult
from models.image_models import UploadedImage


class AnalysisState(str, Enum):
	"""Lifecycle position of an analysis session."""

	IDLE = "idle"
	ANALYZING = "analyzing"
	COMPLETE = "complete"
	ERROR = "error"


@dataclass(frozen=True)
class IdleSession:
	"""Waiting for an image selection."""

	state: ClassVar[AnalysisState] = AnalysisState.IDLE


@dataclass(frozen=True)
class AnalyzingSession:
	"""An image was accepted and its analysis is in flight."""

	image: UploadedImage
	state: ClassVar[AnalysisState] = AnalysisState.ANALYZING


@dataclass(frozen=True)
class CompleteSession:
	"""The remote model returned a full verdict for the image."""

	image: UploadedImage
	result: AnalysisResult
	state: ClassVar[AnalysisState] = AnalysisState.COMPLETE


@dataclass(frozen=True)
class ErrorSession:
	"""Intake or analysis failed.

	`image` is None only when intake rejected the file, since no image could
	be built in that case.
	"""

	message: str
	image: Optional[UploadedImage] = None
	state: ClassVar[AnalysisState] = AnalysisState.ERROR


Session = Union[IdleSession, AnalyzingSession, CompleteSession, ErrorSession]
