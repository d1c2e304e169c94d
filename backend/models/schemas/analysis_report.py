"""Structured CV analysis report returned by the completion service.

Every block has defaults so that a partial model answer still validates.
Scores are rounded and clamped to 0-100.
"""

from typing import Annotated, Any, Optional

from pydantic import BeforeValidator, Field

from models.schemas.base import CamelModel


def _clamp_score(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    return min(100, max(0, round(value)))


Score = Annotated[int, BeforeValidator(_clamp_score)]


class ATSBreakdown(CamelModel):
    formatting: Score = 0
    keywords: Score = 0
    structure: Score = 0
    readability: Score = 0
    file_format: Score = 85


class ATSScore(CamelModel):
    overall: Score = 0
    breakdown: ATSBreakdown = Field(default_factory=ATSBreakdown)
    recommendations: list[str] = []
    pass_rate: str = "Low"  # High | Medium | Low


class GrammarIssue(CamelModel):
    type: str = ""  # grammar | spelling | punctuation
    original_text: str = ""
    corrected_text: str = ""
    message: str = ""
    suggestion: str = ""
    severity: str = ""  # high | medium | low
    location: str = ""


class GrammarBlock(CamelModel):
    score: Score = 0
    issues: list[GrammarIssue] = []


class WeakVerb(CamelModel):
    verb: str = ""
    original_sentence: str = ""
    improved_sentence: str = ""
    location: str = ""


class MissingQuantification(CamelModel):
    original_text: str = ""
    suggested_text: str = ""
    location: str = ""
    metric_type: str = ""  # percentage | number | timeframe | currency


class PassiveVoiceExample(CamelModel):
    original_text: str = ""
    improved_text: str = ""
    location: str = ""


class ImpactBlock(CamelModel):
    score: Score = 0
    weak_verbs: list[WeakVerb] = []
    missing_quantification: list[MissingQuantification] = []
    passive_voice_count: int = 0
    passive_voice_examples: list[PassiveVoiceExample] = []


class ClaritySuggestion(CamelModel):
    issue: str = ""
    original_text: str = ""
    improved_text: str = ""
    location: str = ""


class ClarityBlock(CamelModel):
    score: Score = 0
    avg_sentence_length: float = 0.0
    readability_score: float = 0.0
    improvement_suggestions: list[ClaritySuggestion] = []


class ContentQuality(CamelModel):
    overall: Score = 0
    grammar: GrammarBlock = Field(default_factory=GrammarBlock)
    impact: ImpactBlock = Field(default_factory=ImpactBlock)
    clarity: ClarityBlock = Field(default_factory=ClarityBlock)


class SectionsAnalysis(CamelModel):
    too_long: list[str] = []
    too_short: list[str] = []
    suggestions: list[str] = []


class LengthAnalysis(CamelModel):
    # word_count, page_estimate and is_optimal are recomputed locally
    word_count: int = 0
    page_estimate: int = 0
    recommendation: str = "Add more content to your CV"
    is_optimal: bool = False
    sections_analysis: SectionsAnalysis = Field(default_factory=SectionsAnalysis)


class MatchedKeyword(CamelModel):
    keyword: str = ""
    context: str = ""
    relevance: str = ""


class MissingKeyword(CamelModel):
    keyword: str = ""
    importance: str = ""
    suggested_placement: str = ""
    example_usage: str = ""


class IndustryFit(CamelModel):
    score: Score = 0
    matched_keywords: list[MatchedKeyword] = []
    missing_keywords: list[MissingKeyword] = []
    recommendations: list[str] = []


class AnalysisReport(CamelModel):
    ats_score: ATSScore = Field(default_factory=ATSScore)
    content_quality: ContentQuality = Field(default_factory=ContentQuality)
    length_analysis: LengthAnalysis = Field(default_factory=LengthAnalysis)
    industry_fit: Optional[IndustryFit] = None
