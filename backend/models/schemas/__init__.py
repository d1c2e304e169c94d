"""Contracts shared by the analysis and enhancement services."""

from models.schemas.analysis_report import AnalysisReport, LengthAnalysis
from models.schemas.cv_document import (
    Certification,
    CVDocument,
    EducationEntry,
    ExperienceEntry,
    PersonalInfo,
)
from models.schemas.recommendation import FocusedRecommendation, Recommendation

__all__ = [
    "AnalysisReport",
    "LengthAnalysis",
    "CVDocument",
    "PersonalInfo",
    "ExperienceEntry",
    "EducationEntry",
    "Certification",
    "Recommendation",
    "FocusedRecommendation",
]
