"""Shared test configuration, sample CVs and a scripted completion client."""

import copy
import json

import pytest

from config import settings
from models.schemas.cv_document import CVDocument

SAMPLE_CV_DATA = {
    "personalInfo": {
        "name": "Jane Doe",
        "title": "Senior Software Engineer",
        "email": "jane.doe@email.com",
        "phone": "+1-555-0123",
        "location": "Berlin, Germany",
        "summary": "Led a team.",
        "linkedin": "linkedin.com/in/janedoe",
        "website": "",
        "profilePhoto": "",
    },
    "experience": [
        {
            "id": "exp-1",
            "title": "Senior Software Engineer",
            "company": "Acme",
            "location": "Berlin",
            "startDate": "2020-01",
            "endDate": "",
            "current": True,
            "description": "Built scalable microservices using Python and Go for the payments platform.",
        },
        {
            "id": "exp-2",
            "title": "Software Engineer",
            "company": "Initech",
            "location": "Munich",
            "startDate": "2017-06",
            "endDate": "2019-12",
            "current": False,
            "description": "Developed React frontend applications and CI pipelines.",
        },
    ],
    "education": [
        {
            "id": "edu-1",
            "degree": "BSc Computer Science",
            "institution": "TU Berlin",
            "location": "Berlin",
            "startDate": "2013-10",
            "endDate": "2017-05",
            "current": False,
            "description": "",
        }
    ],
    "skills": ["Python", "Go", "React"],
    "certifications": [
        {
            "id": "cert-1",
            "name": "AWS Solutions Architect",
            "issuer": "Amazon",
            "date": "2021",
            "description": "",
        }
    ],
}

FILLER = "Delivered measurable improvements in reliability, cost and delivery speed across teams. "


class ScriptedCompletionClient:
    """Completion retriever that replays a script of texts and exceptions.

    The last entry repeats once the script is exhausted.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    async def complete(self, request):
        self.requests.append(request)
        item = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def calls(self) -> int:
        return len(self.requests)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: calls the real Gemini API (needs GEMINI_API_KEY)"
    )


@pytest.fixture
def cv_data():
    return copy.deepcopy(SAMPLE_CV_DATA)


@pytest.fixture
def sample_cv(cv_data):
    return CVDocument.model_validate(cv_data)


@pytest.fixture
def scripted_client():
    return ScriptedCompletionClient


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr(settings, "backoff_base_seconds", 0.0)


@pytest.fixture
def enhanced_response(cv_data):
    """Build an enhancement completion that passes every quality check."""

    def _build(**overrides) -> str:
        data = copy.deepcopy(cv_data)
        data["personalInfo"]["summary"] = (
            "Led a cross-functional team of 9 engineers, delivering a 30% performance "
            "improvement across three product lines."
        )
        for entry in data["experience"]:
            entry["description"] = entry["description"] + " " + FILLER * 8
        data["skills"] = data["skills"] + ["Kubernetes", "PostgreSQL"]
        data.update(overrides)
        return json.dumps(data)

    return _build
