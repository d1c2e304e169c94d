import json

import pytest

from models.requests import EnhancementRequest
from models.schemas.cv_document import CVDocument
from models.schemas.recommendation import Recommendation
from services.cv_enhancer import (
    enhance,
    filter_implementable,
    focus_recommendations,
    merge_candidate,
)
from services.errors import MalformedOutputError

RECOMMENDATIONS = [
    {"section": "Experience", "recommendation": "Quantify achievements in each experience entry", "impact": "High", "type": "quantification"},
    {"section": "Skills", "recommendation": "Add keywords such as Kubernetes to your skills", "impact": "Medium", "type": "keyword"},
    {"section": "Formatting", "recommendation": "Save as .docx before uploading", "impact": "Low", "type": "structure"},
    {"section": "Formatting", "recommendation": "Use Arial font in 11pt", "impact": "Low", "type": "structure"},
]


def _recs(*texts) -> list[Recommendation]:
    return [Recommendation(section="General", recommendation=t) for t in texts]


def _request(cv_data, recommendations=RECOMMENDATIONS) -> EnhancementRequest:
    return EnhancementRequest.model_validate({"currentCV": cv_data, "recommendations": recommendations})


def test_filter_drops_only_unapplicable():
    kept = filter_implementable(
        _recs(
            "Save as PDF for ATS",
            "Switch to Calibri",
            "Use a larger font size",
            "Add a projects section",
            "Consider adding certifications",
            "Improve the summary",
        )
    )
    assert [r.recommendation for r in kept] == [
        "Add a projects section",
        "Consider adding certifications",
        "Improve the summary",
    ]


def test_focus_routing():
    focused = focus_recommendations(
        _recs("Add missing keywords", "Quantify your achievements", "Rewrite the summary", "Tidy wording")
    )
    assert [(f.section, f.action) for f in focused] == [
        ("skills", "enhance_keywords"),
        ("experience", "improve_descriptions"),
        ("personalInfo", "enhance_summary"),
        ("general", "improve_content"),
    ]


def test_focus_routes_to_every_matching_section():
    focused = focus_recommendations(_recs("Improve the summary with skill keywords"))
    assert {f.section for f in focused} == {"skills", "personalInfo", "general"}


class TestMergeCandidate:
    def test_missing_sections_come_from_original(self, cv_data, sample_cv):
        candidate = {"personalInfo": {**cv_data["personalInfo"], "summary": "New"}, "experience": "oops"}
        merged = merge_candidate(candidate, sample_cv)

        assert merged.personal_info.summary == "New"
        assert merged.experience == sample_cv.experience
        assert merged.education == sample_cv.education
        assert merged.skills == sample_cv.skills
        assert merged.certifications == sample_cv.certifications

    def test_missing_personal_info_is_malformed(self, sample_cv):
        with pytest.raises(MalformedOutputError):
            merge_candidate({"experience": [], "skills": []}, sample_cv)

    def test_wrong_shape_is_malformed(self, cv_data, sample_cv):
        candidate = {"personalInfo": cv_data["personalInfo"], "skills": [{"name": "Python"}]}
        with pytest.raises(MalformedOutputError):
            merge_candidate(candidate, sample_cv)

    def test_profile_photo_is_restored(self, cv_data):
        cv_data["personalInfo"]["profilePhoto"] = "data:image/png;base64,AAAA"
        original = CVDocument.model_validate(cv_data)
        candidate = {"personalInfo": {"name": "Jane Doe", "profilePhoto": ""}}
        merged = merge_candidate(candidate, original)
        assert merged.personal_info.profile_photo == "data:image/png;base64,AAAA"


class TestEnhance:
    @pytest.mark.asyncio
    async def test_successful_enhancement(self, cv_data, scripted_client, enhanced_response):
        client = scripted_client(enhanced_response())
        response = await enhance(_request(cv_data), client)

        assert response.updated_cv.personal_info.summary.startswith("Led a cross-functional team")
        assert "Kubernetes" in response.updated_cv.skills
        assert response.applied_recommendations == 2
        assert response.skipped_recommendations == 2
        assert response.quality_attempt == 1
        assert response.error is None
        assert response.debug["qualityPassed"] is True
        assert response.message == "CV successfully enhanced."

    @pytest.mark.asyncio
    async def test_request_uses_json_mode_and_hides_photo(self, cv_data, scripted_client, enhanced_response):
        cv_data["personalInfo"]["profilePhoto"] = "data:image/png;base64,AAAA"
        client = scripted_client(enhanced_response())
        await enhance(_request(cv_data), client)

        request = client.requests[0]
        assert request.json_mode is True
        assert request.temperature == 0.05
        assert "base64" not in request.prompt
        assert "1. experience: Quantify achievements in each experience entry" in request.prompt

    @pytest.mark.asyncio
    async def test_prose_response_returns_original(self, cv_data, sample_cv, scripted_client):
        client = scripted_client("I have improved your CV as requested.")
        response = await enhance(_request(cv_data), client)

        assert response.updated_cv == sample_cv
        assert response.error is not None
        assert response.quality_attempt == 3
        assert client.calls == 3

    @pytest.mark.asyncio
    async def test_truncated_skills_fall_back_to_original_skills(
        self, cv_data, sample_cv, scripted_client, enhanced_response
    ):
        text = enhanced_response()
        truncated = text[: text.index('"Kubernetes') + 5]
        response = await enhance(_request(cv_data), scripted_client(truncated))

        assert response.updated_cv.skills == sample_cv.skills
        assert response.updated_cv.personal_info.summary.startswith("Led a cross-functional team")
        assert response.debug["repaired"] is True
        assert response.debug["qualityPassed"] is False
        assert response.error is None

    @pytest.mark.asyncio
    async def test_low_quality_response_is_still_accepted(self, cv_data, scripted_client, enhanced_response):
        weak = enhanced_response(skills=cv_data["skills"])
        client = scripted_client(weak)
        response = await enhance(_request(cv_data), client)

        assert client.calls == 3
        assert response.quality_attempt == 3
        assert response.debug["qualityPassed"] is False
        assert response.updated_cv.personal_info.summary.startswith("Led a cross-functional team")

    @pytest.mark.asyncio
    async def test_nothing_implementable_returns_original(self, cv_data, sample_cv, scripted_client):
        client = scripted_client("unused")
        response = await enhance(_request(cv_data, RECOMMENDATIONS[2:]), client)

        assert response.updated_cv == sample_cv
        assert response.applied_recommendations == 0
        assert response.skipped_recommendations == 2
        assert client.calls == 0

    @pytest.mark.asyncio
    async def test_original_document_is_not_mutated(self, cv_data, scripted_client, enhanced_response):
        request = _request(cv_data)
        before = json.dumps(request.current_cv.model_dump(by_alias=True), sort_keys=True)
        await enhance(request, scripted_client(enhanced_response()))
        after = json.dumps(request.current_cv.model_dump(by_alias=True), sort_keys=True)
        assert before == after
