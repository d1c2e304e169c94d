"""Bounded retry loop around completion retrieval and the quality gate.

Transport failures are retried with exponential backoff and re-raised once
the attempts run out. Quality failures are retried immediately with a fresh
completion; the last attempt's content is returned even if it never passed.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from pydantic import BaseModel

from config import settings
from models.schemas.cv_document import CVDocument
from services.errors import TransportError
from services.gemini_client import CompletionRequest
from services.quality_gate import assess_quality

logger = logging.getLogger(__name__)


class CompletionRetriever(Protocol):
    async def complete(self, request: CompletionRequest) -> str: ...


class CompletionAttempt(BaseModel):
    """One pass through the loop. Lives only for the duration of a request."""
    attempt: int
    content: str = ""
    passed: bool | None = None  # None when the gate was not run
    reason: str = ""


class CompletionResult(BaseModel):
    content: str
    attempt_number: int
    quality_passed: bool
    attempts: list[CompletionAttempt] = []


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt ``attempt`` (1-based): 2s, 4s, 8s..."""
    return (2 ** attempt) * settings.backoff_base_seconds


async def retrying_complete(
    retriever: CompletionRetriever,
    request: CompletionRequest,
    original: CVDocument | None = None,
    max_attempts: int | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> CompletionResult:
    """Retrieve a completion, retrying on transport or quality failures.

    The quality gate runs only when ``original`` is given (enhancement).
    Raises the last TransportError if every attempt failed in transport.
    """
    max_attempts = max_attempts or settings.max_attempts
    attempts: list[CompletionAttempt] = []

    for attempt in range(1, max_attempts + 1):
        logger.info("Completion attempt %d/%d", attempt, max_attempts)
        try:
            content = await retriever.complete(request)
        except TransportError as e:
            attempts.append(CompletionAttempt(attempt=attempt, passed=False, reason=str(e)))
            if attempt == max_attempts:
                logger.error("All %d completion attempts failed: %s", max_attempts, e)
                raise
            delay = backoff_delay(attempt)
            logger.warning("Attempt %d failed (%s), retrying in %gs", attempt, e, delay)
            await sleep(delay)
            continue

        if original is None:
            attempts.append(CompletionAttempt(attempt=attempt, content=content))
            return CompletionResult(
                content=content, attempt_number=attempt, quality_passed=True, attempts=attempts
            )

        verdict = assess_quality(content, original)
        attempts.append(
            CompletionAttempt(
                attempt=attempt, content=content, passed=verdict.passed, reason=verdict.reason
            )
        )
        if verdict.passed:
            logger.info("Quality check passed on attempt %d", attempt)
            return CompletionResult(
                content=content, attempt_number=attempt, quality_passed=True, attempts=attempts
            )
        if attempt < max_attempts:
            logger.warning("Attempt %d below quality bar: %s", attempt, verdict.reason)
            continue

        logger.warning(
            "Quality bar not met after %d attempts, using last response: %s",
            max_attempts, verdict.reason,
        )
        return CompletionResult(
            content=content, attempt_number=attempt, quality_passed=False, attempts=attempts
        )

    raise ValueError("max_attempts must be at least 1")
