"""Apply analysis recommendations to a CV through Gemini.

The enhancement never fails on output quality: a weak completion is retried,
and if nothing usable comes back the original CV is returned unchanged.
Only a missing credential or exhausted transport retries are fatal.
"""

import logging
from typing import Any

from pydantic import ValidationError

from config import settings
from models.requests import EnhancementRequest
from models.responses import EnhancementResponse
from models.schemas.cv_document import CVDocument
from models.schemas.recommendation import FocusedRecommendation, Recommendation
from services import prompt_builder
from services.completion_retry import CompletionRetriever, retrying_complete
from services.errors import MalformedOutputError
from services.gemini_client import CompletionRequest
from services.json_repair import parse_json_object

logger = logging.getLogger(__name__)

ENHANCEMENT_TEMPERATURE = 0.05
ENHANCEMENT_MAX_TOKENS = 4000

# Instructions that cannot be expressed in CV data (file format, typography, printing)
UNAPPLICABLE_PHRASES = (
    "save as",
    ".docx",
    ".pdf",
    "file format",
    "font",
    "arial",
    "calibri",
    "times new roman",
    "printing",
    "printer",
)

# Keyword routing: target section, action, trigger substrings
FOCUS_RULES: list[tuple[str, str, tuple[str, ...]]] = [
    ("skills", "enhance_keywords", ("keyword", "skill")),
    ("experience", "improve_descriptions", ("experience", "achievement", "quantif")),
    ("personalInfo", "enhance_summary", ("summary", "profile", "about")),
    ("general", "improve_content", ("grammar", "action verb", "improve")),
]

REQUIRED_LIST_FIELDS = ("experience", "education", "skills", "certifications")


def filter_implementable(recommendations: list[Recommendation]) -> list[Recommendation]:
    """Drop only recommendations that cannot be applied to CV content."""
    implementable = []
    for rec in recommendations:
        text = rec.recommendation.lower()
        if any(phrase in text for phrase in UNAPPLICABLE_PHRASES):
            logger.info("Skipping unapplicable recommendation: %s", rec.recommendation[:100])
            continue
        implementable.append(rec)
    logger.info(
        "Filtered %d -> %d implementable recommendations",
        len(recommendations), len(implementable),
    )
    return implementable


def focus_recommendations(recommendations: list[Recommendation]) -> list[FocusedRecommendation]:
    """Route each recommendation to the section(s) it should change."""
    focused = []
    for rec in recommendations:
        text = rec.recommendation.lower()
        matched = False
        for section, action, triggers in FOCUS_RULES:
            if any(t in text for t in triggers):
                focused.append(FocusedRecommendation(section=section, action=action, focus=rec.recommendation))
                matched = True
        if not matched:
            focused.append(
                FocusedRecommendation(section="general", action="improve_content", focus=rec.recommendation)
            )
    return focused


def merge_candidate(candidate: dict[str, Any], original: CVDocument) -> CVDocument:
    """Build the enhanced CV, taking missing or malformed sections from the original.

    Raises MalformedOutputError if the candidate has no personal info or
    does not fit the CV shape.
    """
    if not isinstance(candidate.get("personalInfo"), dict):
        raise MalformedOutputError("Missing required field: personalInfo")

    original_data = original.model_dump(by_alias=True)
    merged = dict(candidate)
    for field in REQUIRED_LIST_FIELDS:
        if not isinstance(merged.get(field), list):
            logger.warning("Enhanced CV lacks '%s', keeping the original section", field)
            merged[field] = original_data[field]
    # The photo is never sent to the model
    merged["personalInfo"] = {
        **merged["personalInfo"],
        "profilePhoto": original.personal_info.profile_photo,
    }

    try:
        return CVDocument.model_validate(merged)
    except ValidationError as e:
        raise MalformedOutputError(f"Enhanced CV has unexpected shape: {e}") from e


async def enhance(request: EnhancementRequest, retriever: CompletionRetriever) -> EnhancementResponse:
    """Apply recommendations. Raises TransportError if Gemini never answered."""
    cv = request.current_cv
    total = len(request.recommendations)

    implementable = filter_implementable(request.recommendations)
    skipped = total - len(implementable)
    if not implementable:
        logger.info("No implementable recommendations, returning original CV")
        return EnhancementResponse(
            updated_cv=cv,
            applied_recommendations=0,
            skipped_recommendations=skipped,
            message="No applicable recommendations found for the current CV structure.",
        )

    focused = focus_recommendations(implementable)
    prompt_cv = cv.model_copy(
        update={"personal_info": cv.personal_info.model_copy(update={"profile_photo": ""})}
    )
    completion_request = CompletionRequest(
        system_instruction=prompt_builder.ENHANCEMENT_SYSTEM,
        prompt=prompt_builder.build_enhancement_prompt(prompt_cv, focused),
        temperature=ENHANCEMENT_TEMPERATURE,
        max_output_tokens=ENHANCEMENT_MAX_TOKENS,
        json_mode=True,
        timeout_seconds=settings.completion_timeout_seconds,
    )
    result = await retrying_complete(retriever, completion_request, original=cv)

    debug: dict[str, Any] = {
        "responseLength": len(result.content),
        "qualityPassed": result.quality_passed,
        "attempts": [a.model_dump(exclude={"content"}) for a in result.attempts],
    }
    try:
        candidate, repaired = parse_json_object(result.content)
        debug["repaired"] = repaired
        updated_cv = merge_candidate(candidate, cv)
    except MalformedOutputError as e:
        logger.error("AI response could not be processed, returning original CV: %s", e)
        return EnhancementResponse(
            updated_cv=cv,
            applied_recommendations=0,
            skipped_recommendations=skipped,
            message="AI response could not be processed. Your CV was left unchanged.",
            quality_attempt=result.attempt_number,
            error=str(e),
            debug=debug,
        )

    if result.quality_passed:
        message = "CV successfully enhanced."
    else:
        message = "CV enhanced, but the AI response did not meet every quality check."
    logger.info("CV enhanced on attempt %d (%d recommendations)", result.attempt_number, len(implementable))
    return EnhancementResponse(
        updated_cv=updated_cv,
        applied_recommendations=len(implementable),
        skipped_recommendations=skipped,
        message=message,
        quality_attempt=result.attempt_number,
        debug=debug,
    )
