import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_completion_client, get_optional_completion_client
from config import settings
from models.requests import AnalysisRequest, EnhancementRequest, ParseRecommendationsRequest
from models.responses import (
    AnalysisResponse,
    EnhancementResponse,
    ParseRecommendationsResponse,
    ValidationReport,
)
from models.schemas.cv_document import CVDocument
from services import cv_analyzer, cv_enhancer, cv_validator, recommendation_parser
from services.completion_retry import CompletionRetriever
from services.errors import TransportError

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
    }


@router.post("/ai-analysis", response_model=AnalysisResponse)
@limiter.limit(settings.rate_limit)
async def ai_analysis(
    request: Request,
    body: AnalysisRequest,
    client: CompletionRetriever = Depends(get_completion_client),
):
    try:
        return await cv_analyzer.analyze(body, client)
    except TransportError as e:
        logger.error("Analysis failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": f"Analysis failed: {e}"},
        )


@router.post("/implement-recommendations", response_model=EnhancementResponse)
@limiter.limit(settings.rate_limit)
async def implement_recommendations(
    request: Request,
    body: EnhancementRequest,
    client: CompletionRetriever = Depends(get_completion_client),
):
    if not body.recommendations:
        return JSONResponse(
            status_code=400,
            content={"error": "Valid recommendations array is required"},
        )
    try:
        return await cv_enhancer.enhance(body, client)
    except TransportError as e:
        logger.error("Error implementing recommendations: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to implement recommendations", "details": str(e)},
        )


@router.post("/parse-recommendations", response_model=ParseRecommendationsResponse)
@limiter.limit(settings.rate_limit)
async def parse_recommendations(
    request: Request,
    body: ParseRecommendationsRequest,
    client: CompletionRetriever | None = Depends(get_optional_completion_client),
):
    text = body.recommendations_text.strip()
    if len(text) < recommendation_parser.MIN_REPORT_CHARS:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Please provide a complete AI recommendations report (minimum 50 characters)"
            },
        )
    recommendations, source = await recommendation_parser.parse_recommendations(text, client)
    return ParseRecommendationsResponse(recommendations=recommendations, source=source)


@router.post("/cv/validate", response_model=ValidationReport)
async def validate_cv(body: CVDocument):
    return cv_validator.validate_for_analysis(body)
