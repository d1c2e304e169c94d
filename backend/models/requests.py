from pydantic import Field

from models.schemas.base import CamelModel
from models.schemas.cv_document import CVDocument
from models.schemas.recommendation import Recommendation


class AnalysisRequest(CamelModel):
    cv_data: CVDocument
    analysis_types: list[str] = []
    job_description: str | None = Field(None, max_length=10000)
    industry: str = "technology"


class EnhancementRequest(CamelModel):
    current_cv: CVDocument = Field(..., alias="currentCV")
    recommendations: list[Recommendation] = []


class ParseRecommendationsRequest(CamelModel):
    recommendations_text: str = ""
