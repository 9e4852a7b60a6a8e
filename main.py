import inspect
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from routes.session_route import router as session_router
from services.image_intake import ImageIntake
from services.openai.forensic_analyzer import ForensicAnalyzer
from services.workflow.analysis_workflow import AnalysisWorkflow
from services.workflow.session_store import SessionStore
from utils.settings import Settings

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the OpenAI async client (no automatic retries)
      - the forensic analyzer and the in-memory session store
    and attach them to `app.state`.
    """
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings.validate_required()
    app.state.settings = settings

    try:
        openai_client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout_seconds,
            max_retries=0,
        )
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    app.state.openai_client = openai_client
    analyzer = ForensicAnalyzer(openai_client, model=settings.openai_model)
    intake = ImageIntake(max_bytes=settings.max_upload_bytes)
    app.state.session_store = SessionStore(
        lambda: AnalysisWorkflow(analyzer, intake),
        max_sessions=settings.max_sessions,
        idle_ttl_seconds=settings.session_ttl_seconds,
    )
    LOGGER.info("Forensics service ready (model=%s)", settings.openai_model)

    try:
        yield
    finally:
        discarded = app.state.session_store.discard_all()
        if discarded:
            LOGGER.info("Discarded %d open session(s) on shutdown", discarded)
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception:
                    LOGGER.warning("Error while closing the OpenAI client", exc_info=True)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Veritas Image Forensics", lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports OpenAI client presence and open sessions.
        """
        has_openai = (
            hasattr(request.app.state, "openai_client")
            and request.app.state.openai_client is not None
        )
        store = getattr(request.app.state, "session_store", None)
        return {"ok": True, "openai_available": has_openai, "sessions": len(store) if store is not None else 0}

    app.include_router(session_router)

    return app


app = create_app()
