"""Recover JSON objects from model completions.

Completions may arrive wrapped in Markdown fences, prefixed with prose, or
truncated at the token ceiling. ``repair_json`` never raises: it returns the
first complete object in the text, or, when the text was cut off, the object
truncated back to its last complete top-level field.
"""

import enum
import json
import logging
import re
from typing import Any

from services.errors import MalformedOutputError

logger = logging.getLogger(__name__)

_LEADING_FENCE_RE = re.compile(r"^```(?:json|JSON)?[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?[ \t]*```$")


class ScanState(enum.Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


def strip_code_fences(text: str) -> str:
    """Remove a wrapping ```json / ``` fence. Fences inside the payload are kept."""
    text = (text or "").strip()
    text = _LEADING_FENCE_RE.sub("", text)
    return _TRAILING_FENCE_RE.sub("", text).strip()


def repair_json(raw_text: str) -> str:
    """Return the best parseable JSON object text found in ``raw_text``."""
    text = strip_code_fences(raw_text)
    start = text.find("{")
    if start == -1:
        logger.warning("No JSON object in completion (%d chars)", len(text))
        return "{}"
    text = text[start:]

    state = ScanState.NORMAL
    stack: list[str] = []
    last_field_end: int | None = None  # index of the last comma between root fields

    for i, ch in enumerate(text):
        if state is ScanState.ESCAPED:
            state = ScanState.IN_STRING
        elif state is ScanState.IN_STRING:
            if ch == "\\":
                state = ScanState.ESCAPED
            elif ch == '"':
                state = ScanState.NORMAL
        elif ch == '"':
            state = ScanState.IN_STRING
        elif ch in "{[":
            stack.append(ch)
        elif ch == "}":
            # Closes the nearest open object, and any arrays left open inside it
            while stack and stack.pop() != "{":
                pass
            if not stack:
                return text[: i + 1]
        elif ch == "]":
            if stack[-1] == "[":
                stack.pop()
        elif ch == "," and stack == ["{"]:
            last_field_end = i

    # Truncated: keep only the root fields that were complete, then close the root
    body = "{" if last_field_end is None else text[:last_field_end]
    body = body.rstrip().rstrip(",").rstrip()
    logger.info(
        "Repaired truncated JSON: kept %d of %d chars (open containers: %d)",
        len(body), len(text), len(stack),
    )
    return body + "}"


def parse_json_object(raw_text: str) -> tuple[dict[str, Any], bool]:
    """Parse a completion as a JSON object, repairing it if needed.

    Returns the object and whether repair was necessary.
    Raises MalformedOutputError when even the repaired text is not an object.
    """
    try:
        data = json.loads(strip_code_fences(raw_text))
        if isinstance(data, dict):
            return data, False
    except json.JSONDecodeError as e:
        logger.warning("Direct JSON parse failed (%s), attempting repair", e)

    repaired = repair_json(raw_text)
    try:
        data = json.loads(repaired)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Invalid JSON after repair: {e}") from e
    if not isinstance(data, dict):
        raise MalformedOutputError("Completion is not a JSON object")
    return data, True
