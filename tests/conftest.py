"""
Pytest configuration and fixtures
"""
import asyncio
import io
import os
import sys

import pytest
from PIL import Image

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

from models.analysis_models import AnalysisResult, DetectedArtifact  # noqa: E402
from services.errors import AnalysisError, FailureReason  # noqa: E402


def _encode(fmt: str, color) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 6), color).save(buffer, format=fmt)
    return buffer.getvalue()


class RecordingAnalyzer:
    """Analyzer stub that records calls and returns a fixed result or raises."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def analyze(self, binary_content, media_type):
        self.calls.append((binary_content, media_type))
        if self.error is not None:
            raise self.error
        return self.result


class GatedAnalyzer(RecordingAnalyzer):
    """Analyzer stub whose response is held back until `release()` is called.

    With `ignore_cancel` the stub keeps waiting when its task is cancelled,
    simulating a transport that delivers its response regardless.
    """

    def __init__(self, result=None, error=None, ignore_cancel=False):
        super().__init__(result=result, error=error)
        self.ignore_cancel = ignore_cancel
        self.started = None
        self.gate = None
        self.delivered = False

    async def analyze(self, binary_content, media_type):
        self.calls.append((binary_content, media_type))
        self.started.set()
        try:
            await self.gate.wait()
        except asyncio.CancelledError:
            if not self.ignore_cancel:
                raise
            await self.gate.wait()
        self.delivered = True
        if self.error is not None:
            raise self.error
        return self.result

    def bind(self):
        """Create the events inside the running loop."""
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    def release(self):
        self.gate.set()


@pytest.fixture
def jpeg_bytes():
    return _encode("JPEG", (200, 40, 40))


@pytest.fixture
def png_bytes():
    return _encode("PNG", (40, 40, 200))


@pytest.fixture
def ai_result():
    return AnalysisResult(
        classification="ai-generated",
        confidence=0.92,
        rationale="Smooth skin texture and malformed fingers typical of diffusion models.",
        artifacts=[DetectedArtifact(category="anatomical_error", detail="Six fingers on the left hand.")],
    )


@pytest.fixture
def recording_analyzer(ai_result):
    return RecordingAnalyzer(result=ai_result)


@pytest.fixture
def failing_analyzer():
    return RecordingAnalyzer(error=AnalysisError("Could not reach the analysis service", FailureReason.TRANSPORT))


@pytest.fixture
def make_gated_analyzer(ai_result):
    def _make(error=None, ignore_cancel=False):
        return GatedAnalyzer(result=None if error else ai_result, error=error, ignore_cancel=ignore_cancel)

    return _make


@pytest.fixture
def make_analyzer():
    def _make(result=None, error=None):
        return RecordingAnalyzer(result=result, error=error)

    return _make
