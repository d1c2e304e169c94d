"""Google Gemini API wrapper: one completion in, raw text out.

Failures are reported as the three transport error kinds so that the retry
orchestrator can treat them uniformly.
"""

import asyncio
import logging

import httpx
from google import genai
from google.genai import errors, types
from pydantic import BaseModel

from config import settings
from services.errors import (
    CompletionTimeoutError,
    ConfigurationError,
    EmptyResponseError,
    NetworkError,
)

logger = logging.getLogger(__name__)

_client: genai.Client | None = None


class CompletionRequest(BaseModel):
    system_instruction: str
    prompt: str
    temperature: float = 0.2
    max_output_tokens: int = 3000
    json_mode: bool = False
    timeout_seconds: float = 60.0


def get_client() -> genai.Client:
    global _client
    if not settings.gemini_api_key:
        logger.error("No GEMINI_API_KEY set - AI features disabled")
        raise ConfigurationError(
            "Gemini API key not configured. Please add GEMINI_API_KEY to your environment variables."
        )
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


class GeminiCompletionClient:
    """Completion retriever backed by the async Gemini client.

    Without an explicit SDK client the shared one is resolved on the first
    call, so a missing key raises ConfigurationError from ``complete``.
    """

    def __init__(self, client: genai.Client | None = None, model: str | None = None):
        self._client = client
        self.model = model or settings.gemini_model

    async def complete(self, request: CompletionRequest) -> str:
        if self._client is None:
            self._client = get_client()
        config = types.GenerateContentConfig(
            system_instruction=request.system_instruction,
            temperature=request.temperature,
            max_output_tokens=request.max_output_tokens,
            response_mime_type="application/json" if request.json_mode else None,
        )
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.model,
                    contents=request.prompt,
                    config=config,
                ),
                timeout=request.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise CompletionTimeoutError(
                f"Completion timed out after {request.timeout_seconds:g}s"
            ) from None
        except errors.APIError as e:
            logger.error("Gemini API error: %s %s", e.code, e.message)
            raise NetworkError(e.code, e.message or str(e)) from e
        except httpx.HTTPError as e:
            logger.error("Gemini transport error: %s", e)
            raise NetworkError(None, str(e)) from e

        text = (response.text or "").strip()
        if not text:
            raise EmptyResponseError("No response text from Gemini")
        logger.debug("Gemini response received, length: %d", len(text))
        return text
