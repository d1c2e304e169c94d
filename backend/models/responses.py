from typing import Any

from pydantic import Field

from models.schemas.analysis_report import AnalysisReport
from models.schemas.base import CamelModel
from models.schemas.cv_document import CVDocument
from models.schemas.recommendation import Recommendation


class AnalysisResponse(CamelModel):
    success: bool
    results: AnalysisReport | None = None
    error: str | None = None


class EnhancementResponse(CamelModel):
    updated_cv: CVDocument = Field(..., alias="updatedCV")
    applied_recommendations: int = 0
    skipped_recommendations: int = 0
    message: str = ""
    quality_attempt: int | None = None
    error: str | None = None
    debug: dict[str, Any] | None = None


class ParseRecommendationsResponse(CamelModel):
    recommendations: list[Recommendation] = []
    source: str = "ai"  # ai | fallback


class ValidationReport(CamelModel):
    is_valid: bool
    completion_score: int
    missing_fields: list[str] = []
    recommendations: list[str] = []
    message: str = ""
    word_count: int = 0
