"""Recommendations coming out of an analysis, and their routing for enhancement."""

from pydantic import BaseModel

from models.schemas.base import CamelModel


class Recommendation(CamelModel):
    section: str = ""
    recommendation: str
    impact: str = "Medium"
    type: str = "improvement"


class FocusedRecommendation(BaseModel):
    """A recommendation routed to the CV section it should change."""
    section: str  # skills | experience | personalInfo | general
    action: str
    focus: str
