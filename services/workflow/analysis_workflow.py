"""State machine driving one image analysis session.

The workflow owns a single session value and is its only writer. Selecting an
image runs intake in a worker thread and, when intake succeeds, starts exactly one
analysis task. Every selection and reset bumps an epoch; an analysis outcome
is applied only if the epoch it was started under is still current, so a
response that arrives after a reset can never resurrect an outdated session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Set

from fastapi import UploadFile

from models.analysis_models import AnalysisResult
from models.image_models import UploadedImage
from models.session_models import (
	AnalysisState,
	AnalyzingSession,
	CompleteSession,
	ErrorSession,
	IdleSession,
	Session,
)
from services.errors import AnalysisError, IntakeError, WorkflowBusyError
from services.image_intake import ImageIntake
from utils.media_validation import read_image_bytes

LOGGER = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = (
	"Failed to analyze the image. Please ensure the API key is valid or try a different image."
)
INTAKE_FAILED_MESSAGE = "The selected file could not be used as an image."


class Analyzer(Protocol):
	"""Anything able to turn encoded image content into a verdict."""

	async def analyze(self, binary_content: str, media_type: str) -> AnalysisResult:
		...


class AnalysisWorkflow:
	"""Drive the Idle -> Analyzing -> Complete/Error cycle for one session.

	New selections are rejected with `WorkflowBusyError` unless the session
	is idle; they are never queued.
	"""

	def __init__(self, analyzer: Analyzer, intake: Optional[ImageIntake] = None) -> None:
		if analyzer is None:
			raise ValueError("An analyzer is required.")
		self.analyzer = analyzer
		self.intake = intake or ImageIntake()
		self._session: Session = IdleSession()
		self._epoch = 0
		self._task: Optional[asyncio.Task] = None
		self._tasks: Set[asyncio.Task] = set()

	@property
	def session(self) -> Session:
		"""Return the current session."""
		return self._session

	@property
	def state(self) -> AnalysisState:
		return self._session.state

	@property
	def epoch(self) -> int:
		return self._epoch

	async def select_image(
		self,
		data: bytes,
		*,
		content_type: Optional[str] = None,
		filename: Optional[str] = None,
	) -> Session:
		"""Accept a user-selected image and start its analysis.

		Args:
			data: Raw bytes of the selected file.
			content_type: MIME type declared by the client.
			filename: Filename declared by the client.

		Returns:
			The `Analyzing` session, or an `Error` session when intake rejected the file.

		Raises:
			WorkflowBusyError: If the session is not idle.
		"""
		self._ensure_idle()
		epoch = self._epoch
		try:
			image = await asyncio.to_thread(
				self.intake.intake, data, content_type=content_type, filename=filename
			)
		except IntakeError as exc:
			image, rejection = None, exc
		else:
			rejection = None
		# Intake ran off the loop; another selection or a reset may have landed.
		self._ensure_idle()
		if epoch != self._epoch:
			LOGGER.info("Selection superseded by a reset during intake")
			return self._session
		if rejection is not None:
			return self._reject_intake(rejection)
		return self._start(image)

	async def select_upload(self, upload: UploadFile) -> Session:
		"""Read an uploaded file and hand it to `select_image`."""
		self._ensure_idle()
		try:
			data = await read_image_bytes(upload)
		except IntakeError as exc:
			self._ensure_idle()
			return self._reject_intake(exc)
		return await self.select_image(data, content_type=upload.content_type, filename=upload.filename)

	async def wait(self) -> Session:
		"""Suspend until the in-flight analysis settles, then return the session.

		Waiting never cancels the analysis; a reset while waiting returns the
		fresh idle session.
		"""
		task = self._task
		if task is not None and not task.done():
			await asyncio.wait({task})
		return self._session

	def reset(self) -> Session:
		"""Discard the current session and return to idle.

		Any in-flight analysis is cancelled and its eventual outcome ignored.
		"""
		self._epoch += 1
		task, self._task = self._task, None
		if task is not None and not task.done():
			LOGGER.info("Reset while analyzing; cancelling in-flight analysis")
			task.cancel()
		self._session = IdleSession()
		return self._session

	def _ensure_idle(self) -> None:
		if not isinstance(self._session, IdleSession):
			raise WorkflowBusyError(self._session.state)

	def _reject_intake(self, exc: IntakeError) -> Session:
		LOGGER.warning("Image intake rejected the selected file: %s", exc)
		self._epoch += 1
		self._session = ErrorSession(message=f"{INTAKE_FAILED_MESSAGE} {exc}")
		return self._session

	def _start(self, image: UploadedImage) -> Session:
		self._epoch += 1
		self._session = AnalyzingSession(image=image)
		task = asyncio.get_running_loop().create_task(self._run(self._epoch, image))
		self._task = task
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)
		return self._session

	async def _run(self, epoch: int, image: UploadedImage) -> None:
		try:
			result = await self.analyzer.analyze(image.binary_content, image.media_type)
		except AnalysisError as exc:
			LOGGER.error("Image analysis failed (%s): %s", exc.reason.value, exc)
			self._settle(epoch, ErrorSession(message=ANALYSIS_FAILED_MESSAGE, image=image))
		except Exception:  # pylint: disable=broad-exception-caught
			LOGGER.exception("Unexpected error during image analysis")
			self._settle(epoch, ErrorSession(message=ANALYSIS_FAILED_MESSAGE, image=image))
		else:
			self._settle(epoch, CompleteSession(image=image, result=result))

	def _settle(self, epoch: int, session: Session) -> bool:
		"""Apply an analysis outcome unless the session has moved on."""
		if epoch != self._epoch:
			LOGGER.info("Discarding stale %s outcome from epoch %d (current %d)", session.state.value, epoch, self._epoch)
			return False
		self._session = session
		self._task = None
		return True
