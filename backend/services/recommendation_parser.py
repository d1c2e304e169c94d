"""Turn a free-text recommendations report into structured recommendations.

Gemini does the parsing when it is configured; otherwise, or when its
answer is unusable, a line-based heuristic parser takes over.
"""

import json
import logging
import re
from typing import Any

from config import settings
from models.schemas.recommendation import Recommendation
from services import prompt_builder
from services.completion_retry import CompletionRetriever
from services.errors import TransportError
from services.gemini_client import CompletionRequest
from services.json_repair import strip_code_fences

logger = logging.getLogger(__name__)

MIN_REPORT_CHARS = 50
MAX_FALLBACK_RECOMMENDATIONS = 10

KNOWN_SECTIONS = ["Experience", "Skills", "Education", "Personal Info", "Summary", "Certifications"]
HIGH_IMPACT_WORDS = ("critical", "important", "essential", "key", "major", "significant")
LOW_IMPACT_WORDS = ("minor", "small", "slight", "optional", "consider")

_BULLET_RE = re.compile(r"^(?:[•\-*]|\d+[.)])\s*")
_ACTION_RE = re.compile(r"(add|include|update|remove|consider|improve|enhance)\s+(.+)", re.IGNORECASE)


def determine_impact(text: str) -> str:
    lower = text.lower()
    if any(w in lower for w in HIGH_IMPACT_WORDS):
        return "High"
    if any(w in lower for w in LOW_IMPACT_WORDS):
        return "Low"
    return "Medium"


def determine_type(text: str) -> str:
    lower = text.lower()
    if "keyword" in lower or "skill" in lower:
        return "keyword"
    if "quantif" in lower or "number" in lower or "metric" in lower:
        return "quantification"
    if "grammar" in lower or "spelling" in lower:
        return "grammar"
    if "format" in lower or "structure" in lower:
        return "structure"
    return "improvement"


def parse_fallback(text: str) -> list[Recommendation]:
    """Heuristic parser: bullet lines and action sentences become recommendations."""
    recommendations: list[Recommendation] = []
    current_section = "General"

    for line in text.splitlines():
        stripped = line.strip()
        if len(stripped) <= 10:
            continue

        for section in KNOWN_SECTIONS:
            if section.lower() in stripped.lower():
                current_section = section
                break

        bullet = _BULLET_RE.match(stripped)
        if bullet:
            cleaned = stripped[bullet.end():].strip()
            if len(cleaned) > 15:
                recommendations.append(
                    Recommendation(
                        section=current_section,
                        recommendation=cleaned,
                        impact=determine_impact(cleaned),
                        type=determine_type(cleaned),
                    )
                )
                continue

        action = _ACTION_RE.search(stripped)
        if action and len(action.group(2)) > 10:
            recommendations.append(
                Recommendation(
                    section=current_section,
                    recommendation=stripped,
                    impact=determine_impact(stripped),
                    type=determine_type(stripped),
                )
            )

    if not recommendations:
        recommendations.append(
            Recommendation(
                section="General",
                recommendation="Review and implement the AI recommendations provided in the text",
                impact="Medium",
                type="general",
            )
        )
    return recommendations[:MAX_FALLBACK_RECOMMENDATIONS]


def _valid_recommendations(data: Any) -> list[Recommendation]:
    if isinstance(data, dict):
        data = data.get("recommendations")
    if not isinstance(data, list):
        return []
    valid = []
    for item in data:
        if not isinstance(item, dict):
            continue
        section, text = item.get("section"), item.get("recommendation")
        if not (isinstance(section, str) and section and isinstance(text, str) and text):
            continue
        valid.append(
            Recommendation(
                section=section,
                recommendation=text,
                impact=str(item.get("impact") or "Medium"),
                type=str(item.get("type") or "improvement"),
            )
        )
    return valid


async def parse_recommendations(
    text: str, retriever: CompletionRetriever | None
) -> tuple[list[Recommendation], str]:
    """Return (recommendations, source) where source is "ai" or "fallback"."""
    if retriever is None:
        logger.warning("Gemini not configured, using fallback recommendation parsing")
        return parse_fallback(text), "fallback"

    request = CompletionRequest(
        system_instruction=prompt_builder.RECOMMENDATIONS_SYSTEM,
        prompt=text,
        temperature=0.3,
        max_output_tokens=2000,
        json_mode=True,
        timeout_seconds=settings.completion_timeout_seconds,
    )
    try:
        content = await retriever.complete(request)
    except TransportError as e:
        logger.warning("Recommendation parsing via Gemini failed (%s), using fallback", e)
        return parse_fallback(text), "fallback"

    try:
        data = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        logger.warning("Could not parse recommendations JSON (%s), using fallback", e)
        return parse_fallback(text), "fallback"

    recommendations = _valid_recommendations(data)
    if not recommendations:
        logger.warning("No valid recommendations in Gemini response, using fallback")
        return parse_fallback(text), "fallback"
    return recommendations, "ai"
