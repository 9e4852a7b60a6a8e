"""Description: Image authenticity analysis using OpenAI's Responses API."""

import logging
import time
from typing import Any, Dict, List

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from models.analysis_models import AnalysisResult
from services.errors import AnalysisError, FailureReason
from services.openai.forensic_prompts import build_system_prompt, build_user_prompt
from services.openai.forensic_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from services.openai.media_inputs import build_inputs, to_image_data_url
from services.openai.response_parser import extract_refusal, extract_usage, parse_function_call
from utils.settings import DEFAULT_MODEL

LOGGER = logging.getLogger(__name__)


class ForensicAnalyzer:
    """Send one image to the remote model and return its forensic verdict.

    A call is a single round trip: it either returns a fully validated
    `AnalysisResult` or raises `AnalysisError`. The analyzer keeps no state
    between calls.
    """

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        """Initialize the ForensicAnalyzer with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()
        self.user_prompt = build_user_prompt()

    async def analyze(self, binary_content: str, media_type: str) -> AnalysisResult:
        """Return the forensic verdict for base64 image content of the given media type."""
        start_time = time.time()
        inputs = build_inputs(
            self.system_prompt,
            self.user_prompt,
            image_url=to_image_data_url(binary_content, media_type),
        )
        response = await self._create_response(inputs)
        result = self._parse_response(response)
        usage = extract_usage(response)
        LOGGER.info(
            "Forensic analysis latency: %.3fs (input_tokens=%s, output_tokens=%s)",
            time.time() - start_time,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return result

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the multimodal request, translating client errors into AnalysisError."""
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": FUNCTION_NAME},
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AnalysisError(
                "The analysis service rejected the configured credentials.", FailureReason.AUTHENTICATION
            ) from exc
        except openai.RateLimitError as exc:
            raise AnalysisError("The analysis service quota or rate limit was exceeded.", FailureReason.RATE_LIMITED) from exc
        except openai.BadRequestError as exc:
            raise AnalysisError(f"The analysis service declined the request: {exc}", FailureReason.DECLINED) from exc
        except openai.APIConnectionError as exc:
            raise AnalysisError(f"Could not reach the analysis service: {exc}", FailureReason.TRANSPORT) from exc
        except openai.APIStatusError as exc:
            raise AnalysisError(
                f"The analysis service returned HTTP {exc.status_code}.", FailureReason.SERVICE
            ) from exc
        except openai.OpenAIError as exc:
            raise AnalysisError(f"OpenAI Responses API error: {exc}", FailureReason.SERVICE) from exc

    def _parse_response(self, response: Any) -> AnalysisResult:
        """Validate the function-call output into a complete AnalysisResult."""
        try:
            arguments = parse_function_call(response, tool_name=FUNCTION_NAME)
        except RuntimeError as exc:
            refusal = extract_refusal(response)
            if refusal:
                raise AnalysisError(f"The model declined to analyze the image: {refusal}", FailureReason.DECLINED) from exc
            LOGGER.error("Full response object: %r", response)
            raise AnalysisError(str(exc), FailureReason.MALFORMED) from exc

        try:
            return AnalysisResult.model_validate_json(arguments, strict=True)
        except ValidationError as exc:
            LOGGER.error("Error parsing forensic verdict: %s", exc)
            raise AnalysisError(
                "The analysis response did not match the forensic verdict schema.", FailureReason.MALFORMED
            ) from exc
