import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.genai import errors

from config import settings
from services import gemini_client
from services.errors import (
    CompletionTimeoutError,
    ConfigurationError,
    EmptyResponseError,
    NetworkError,
)
from services.gemini_client import CompletionRequest, GeminiCompletionClient


def _client_returning(**kwargs) -> MagicMock:
    sdk = MagicMock()
    sdk.aio.models.generate_content = AsyncMock(**kwargs)
    return sdk


def _request(**overrides) -> CompletionRequest:
    return CompletionRequest(system_instruction="system", prompt="prompt", **overrides)


@pytest.mark.asyncio
async def test_returns_stripped_text():
    sdk = _client_returning(return_value=SimpleNamespace(text='  {"a": 1}\n'))
    client = GeminiCompletionClient(sdk, model="gemini-test")
    assert await client.complete(_request()) == '{"a": 1}'

    kwargs = sdk.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["contents"] == "prompt"
    assert kwargs["config"].system_instruction == "system"


@pytest.mark.asyncio
async def test_json_mode_requests_json_mime_type():
    sdk = _client_returning(return_value=SimpleNamespace(text="{}"))
    await GeminiCompletionClient(sdk).complete(_request(json_mode=True, temperature=0.05))

    config = sdk.aio.models.generate_content.call_args.kwargs["config"]
    assert config.response_mime_type == "application/json"
    assert config.temperature == 0.05


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [None, "", "   "])
async def test_empty_text_raises(text):
    sdk = _client_returning(return_value=SimpleNamespace(text=text))
    with pytest.raises(EmptyResponseError):
        await GeminiCompletionClient(sdk).complete(_request())


@pytest.mark.asyncio
async def test_api_error_surfaces_status_and_body():
    error = errors.ClientError(
        404, {"error": {"code": 404, "message": "model not found", "status": "NOT_FOUND"}}
    )
    sdk = _client_returning(side_effect=error)
    with pytest.raises(NetworkError) as exc_info:
        await GeminiCompletionClient(sdk).complete(_request())
    assert exc_info.value.status_code == 404
    assert "model not found" in exc_info.value.body


@pytest.mark.asyncio
async def test_transport_error_is_network_error():
    sdk = _client_returning(side_effect=httpx.ConnectError("connection refused"))
    with pytest.raises(NetworkError) as exc_info:
        await GeminiCompletionClient(sdk).complete(_request())
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_timeout():
    async def _slow(**kwargs):
        await asyncio.sleep(5)

    sdk = MagicMock()
    sdk.aio.models.generate_content = _slow
    with pytest.raises(CompletionTimeoutError):
        await GeminiCompletionClient(sdk).complete(_request(timeout_seconds=0.01))


def test_get_client_requires_api_key(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "")
    with pytest.raises(ConfigurationError):
        gemini_client.get_client()


@pytest.mark.asyncio
async def test_missing_key_raises_on_first_completion(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "")
    client = GeminiCompletionClient()
    with pytest.raises(ConfigurationError):
        await client.complete(_request())


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.skipif(not settings.gemini_api_key, reason="GEMINI_API_KEY not set")
async def test_live_json_completion():
    request = CompletionRequest(
        system_instruction="Reply with a JSON object only.",
        prompt='Return {"status": "ok"}.',
        temperature=0.0,
        max_output_tokens=50,
        json_mode=True,
    )
    text = await GeminiCompletionClient().complete(request)
    assert text.lstrip().startswith("{")
