"""Session lifecycle helpers for the image analysis workflow."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import Response

from models.session_models import Session
from services.errors import WorkflowBusyError
from services.workflow.analysis_workflow import AnalysisWorkflow
from services.workflow.session_store import SessionStore


def serialize_session(session_id: str, session: Session) -> Dict[str, Any]:
	"""Return the payload consumed by the result presenter.

	`result` is only ever populated for a completed session, together with an
	image whose `preview_reference` can be rendered directly.
	"""
	image = getattr(session, "image", None)
	result = getattr(session, "result", None)
	return {
		"session_id": session_id,
		"state": session.state.value,
		"image": {
			"media_type": image.media_type,
			"filename": image.filename,
			"byte_size": image.byte_size,
			"preview_reference": image.preview_reference,
		} if image is not None else None,
		"result": result.model_dump() if result is not None else None,
		"error": getattr(session, "message", None),
	}


def _store(request: Request) -> SessionStore:
	store: Optional[SessionStore] = getattr(request.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


def _workflow(request: Request, session_id: str) -> AnalysisWorkflow:
	try:
		return _store(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=f"Session {session_id} not found") from exc


async def start_session(request: Request) -> Dict[str, Any]:
	"""Create a new idle session and return it."""
	session_id, workflow = _store(request).create()
	return serialize_session(session_id, workflow.session)


async def get_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return the current state of a session."""
	return serialize_session(session_id, _workflow(request, session_id).session)


async def submit_image(request: Request, session_id: str, image: UploadFile, wait: bool = True) -> Dict[str, Any]:
	"""Select an image for analysis, optionally waiting for the verdict."""
	workflow = _workflow(request, session_id)
	try:
		session = await workflow.select_upload(image)
	except WorkflowBusyError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	if wait:
		session = await workflow.wait()
	return serialize_session(session_id, session)


async def reset_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return a session to idle, discarding its image, result and error."""
	return serialize_session(session_id, _workflow(request, session_id).reset())


async def discard_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Forget a session entirely."""
	try:
		_store(request).discard(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=f"Session {session_id} not found") from exc
	return {"session_id": session_id, "discarded": True}


async def get_preview(request: Request, session_id: str) -> Response:
	"""Return the raw bytes of the session's image with its declared media type."""
	image = getattr(_workflow(request, session_id).session, "image", None)
	if image is None:
		raise HTTPException(status_code=404, detail="No image selected for this session")
	return Response(content=image.decoded_bytes(), media_type=image.media_type)
