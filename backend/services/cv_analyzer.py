"""CV analysis: ATS score, content quality, length and industry fit.

Pipeline:
1. Flatten the CV to text and reject CVs too short to analyze
2. Request the analysis from Gemini (retried on transport failures)
3. Parse the report, repairing truncated JSON if needed
4. Overwrite the length metrics with locally computed values
"""

import logging

from pydantic import ValidationError

from config import settings
from models.requests import AnalysisRequest
from models.responses import AnalysisResponse
from models.schemas.analysis_report import AnalysisReport
from services import prompt_builder
from services.completion_retry import CompletionRetriever, retrying_complete
from services.errors import MalformedOutputError
from services.gemini_client import CompletionRequest
from services.json_repair import parse_json_object
from services.text_extractor import count_words, estimate_pages, extract_text, is_optimal_length

logger = logging.getLogger(__name__)

MIN_CV_CHARS = 50
ANALYSIS_TEMPERATURE = 0.2
ANALYSIS_MAX_TOKENS = 3000
REPORT_SECTIONS = ("atsScore", "contentQuality", "lengthAnalysis", "industryFit")


def apply_local_length(report: AnalysisReport, cv_text: str) -> AnalysisReport:
    """Replace model-reported word count, page estimate and optimality."""
    word_count = count_words(cv_text)
    length = report.length_analysis.model_copy(
        update={
            "word_count": word_count,
            "page_estimate": estimate_pages(word_count),
            "is_optimal": is_optimal_length(word_count),
        }
    )
    return report.model_copy(update={"length_analysis": length})


def parse_report(content: str) -> AnalysisReport:
    data, repaired = parse_json_object(content)
    if repaired:
        logger.warning("Analysis response was repaired before parsing")
    if not any(key in data for key in REPORT_SECTIONS):
        raise MalformedOutputError("Analysis response contains no report sections")
    try:
        return AnalysisReport.model_validate(data)
    except ValidationError as e:
        raise MalformedOutputError(f"Analysis report has unexpected shape: {e}") from e


async def analyze(request: AnalysisRequest, retriever: CompletionRetriever) -> AnalysisResponse:
    """Run the analysis. Raises TransportError if the completion service never answered."""
    cv = request.cv_data
    logger.info(
        "Analyzing CV: experience=%d skills=%d",
        len(cv.experience), len(cv.skills),
    )

    cv_text = extract_text(cv)
    if len(cv_text.strip()) < MIN_CV_CHARS:
        return AnalysisResponse(
            success=False,
            error="CV content is too short for meaningful analysis. Please add more details to your CV.",
        )

    completion_request = CompletionRequest(
        system_instruction=prompt_builder.ANALYSIS_SYSTEM,
        prompt=prompt_builder.build_analysis_prompt(
            cv_text,
            request.job_description,
            industry=request.industry,
            analysis_types=request.analysis_types,
        ),
        temperature=ANALYSIS_TEMPERATURE,
        max_output_tokens=ANALYSIS_MAX_TOKENS,
        timeout_seconds=settings.completion_timeout_seconds,
    )
    result = await retrying_complete(retriever, completion_request)

    try:
        report = parse_report(result.content)
    except MalformedOutputError as e:
        logger.error("Failed to parse analysis response: %s", e)
        return AnalysisResponse(success=False, error=f"Failed to parse analysis results: {e}")

    report = apply_local_length(report, cv_text)
    logger.info(
        "Analysis completed: ats=%d quality=%d words=%d",
        report.ats_score.overall,
        report.content_quality.overall,
        report.length_analysis.word_count,
    )
    return AnalysisResponse(success=True, results=report)
