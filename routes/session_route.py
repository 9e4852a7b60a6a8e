"""FastAPI routes for image analysis sessions."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from controllers.session_controller import (
	discard_session,
	get_preview,
	get_session,
	reset_session,
	start_session,
	submit_image,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", status_code=201)
async def start_session_route(request: Request):
	try:
		return await start_session(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	try:
		return await get_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/image", summary="Submit an image for forensic analysis")
async def submit_image_route(request: Request, session_id: str, image: UploadFile = File(...), wait: bool = True):
	"""Run intake on the uploaded image and start its analysis.

	With `wait` (the default) the response carries the settled session;
	otherwise it returns immediately in the `analyzing` state and the client
	polls `GET /sessions/{session_id}`.
	"""
	try:
		return await submit_image(request, session_id, image, wait=wait)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/reset")
async def reset_session_route(request: Request, session_id: str):
	try:
		return await reset_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def discard_session_route(request: Request, session_id: str):
	try:
		return await discard_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/preview")
async def get_preview_route(request: Request, session_id: str):
	"""Return the selected image bytes for redisplay."""
	try:
		return await get_preview(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
