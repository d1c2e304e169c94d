"""Heuristic checks that an enhancement completion actually improved the CV.

Checks run in order and stop at the first failure:
1. the raw completion is long enough to hold a full CV
2. it parses as JSON (no repair here; a failing attempt is retried instead)
3. the summary grew by more than MIN_SUMMARY_GROWTH characters
4. at least one experience description grew by more than MIN_EXPERIENCE_GROWTH
5. the skill list grew, when the original had skills
"""

import json
import logging
from typing import Any

from pydantic import BaseModel

from models.schemas.cv_document import CVDocument
from services.errors import QualityShortfallError
from services.json_repair import strip_code_fences

logger = logging.getLogger(__name__)

MIN_RESPONSE_CHARS = 2000
MIN_SUMMARY_GROWTH = 50
MIN_EXPERIENCE_GROWTH = 100


class QualityVerdict(BaseModel):
    passed: bool
    reason: str = ""


def _text_len(value: Any) -> int:
    return len(value) if isinstance(value, str) else 0


def _check_length(raw_text: str) -> None:
    if len(raw_text) < MIN_RESPONSE_CHARS:
        raise QualityShortfallError(
            f"Response too short ({len(raw_text)} < {MIN_RESPONSE_CHARS} chars)"
        )


def _parse(raw_text: str) -> dict[str, Any]:
    try:
        data = json.loads(strip_code_fences(raw_text))
    except json.JSONDecodeError:
        raise QualityShortfallError("Invalid JSON") from None
    if not isinstance(data, dict):
        raise QualityShortfallError("Invalid JSON")
    return data


def _check_summary(candidate: dict[str, Any], original: CVDocument) -> None:
    personal = candidate.get("personalInfo")
    new_len = _text_len(personal.get("summary")) if isinstance(personal, dict) else 0
    old_len = len(original.personal_info.summary)
    if old_len == 0:
        # An empty summary only needs MIN_SUMMARY_GROWTH chars of new content
        enhanced = new_len >= MIN_SUMMARY_GROWTH
    else:
        enhanced = new_len > old_len + MIN_SUMMARY_GROWTH
    if not enhanced:
        raise QualityShortfallError(
            f"Summary not enhanced enough ({old_len} -> {new_len} chars)"
        )


def _check_experience(candidate: dict[str, Any], original: CVDocument) -> None:
    if not original.experience:
        return
    entries = candidate.get("experience")
    if not isinstance(entries, list):
        entries = []
    for old, new in zip(original.experience, entries):
        new_len = _text_len(new.get("description")) if isinstance(new, dict) else 0
        if new_len > len(old.description) + MIN_EXPERIENCE_GROWTH:
            return
    raise QualityShortfallError("No experience description was meaningfully expanded")


def _check_skills(candidate: dict[str, Any], original: CVDocument) -> None:
    if not original.skills:
        return
    skills = candidate.get("skills")
    new_count = len(skills) if isinstance(skills, list) else 0
    if new_count <= len(original.skills):
        raise QualityShortfallError(
            f"Skills not expanded ({len(original.skills)} -> {new_count})"
        )


def check_quality(raw_text: str, original: CVDocument) -> dict[str, Any]:
    """Run every check; return the parsed candidate or raise QualityShortfallError."""
    _check_length(raw_text)
    candidate = _parse(raw_text)
    _check_summary(candidate, original)
    _check_experience(candidate, original)
    _check_skills(candidate, original)
    return candidate


def assess_quality(raw_text: str, original: CVDocument) -> QualityVerdict:
    try:
        check_quality(raw_text, original)
    except QualityShortfallError as e:
        logger.info("Quality check failed: %s", e)
        return QualityVerdict(passed=False, reason=str(e))
    return QualityVerdict(passed=True)
