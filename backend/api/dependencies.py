"""Shared dependencies for API routes."""

from config import settings
from services.gemini_client import GeminiCompletionClient


def get_completion_client() -> GeminiCompletionClient:
    """Completion client for routes that cannot work without Gemini.

    The credential is checked when the first completion is requested, after
    the request body has been validated.
    """
    return GeminiCompletionClient()


def get_optional_completion_client() -> GeminiCompletionClient | None:
    """Completion client, or None when Gemini is not configured."""
    if not settings.gemini_api_key:
        return None
    return GeminiCompletionClient()
