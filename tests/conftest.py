"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from skill_roadmap.clients.llm_client import LLMClient, LLMResponse
from skill_roadmap.clients.onet_client import RateLimitedOccupationClient, RequestCounter
from skill_roadmap.models.occupation import (
    Ability,
    KnowledgeArea,
    LaborMarketData,
    OccupationRecord,
    Skill,
)


class FakeClock:
    """Manually advanced clock for TTL and rate-limit tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_resume() -> dict:
    return {
        "title": "Jane Doe - Backend Engineer",
        "personalInfo": {
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "jane.doe@example.com",
            "phone": "+1 555-123-4567",
            "location": "Seattle, WA",
            "linkedin": "https://linkedin.com/in/janedoe",
            "summary": (
                "Backend engineer with 6 years of experience building scalable APIs "
                "in Python and Go. Passionate about reliability and mentoring."
            ),
        },
        "experience": [
            {
                "title": "Senior Software Engineer",
                "company": "Acme Cloud",
                "startDate": "2021-03",
                "endDate": "Present",
                "description": "Led a team of 5 engineers building the billing platform.",
                "achievements": [
                    "Reduced API latency by 40% by redesigning the caching layer",
                    "Led migration to Kubernetes, cutting infrastructure costs by $120K per year",
                    "Mentored 3 junior engineers through promotion",
                ],
            },
            {
                "title": "Software Engineer",
                "company": "Startup Inc",
                "startDate": "2018-06",
                "endDate": "2021-02",
                "description": "Built REST APIs with Python and PostgreSQL.",
                "achievements": [
                    "Developed an event pipeline processing 2M events per day",
                    "Improved test coverage from 45% to 90%",
                ],
            },
        ],
        "education": [
            {
                "degree": "B.S.",
                "field": "Computer Science",
                "institution": "State University",
                "graduationDate": "2018",
            }
        ],
        "skills": [
            {"name": "Python", "level": "expert"},
            {"name": "SQL", "level": "advanced"},
            {"name": "Kubernetes", "level": 60},
        ],
        "certifications": ["AWS Certified Solutions Architect"],
        "metadata": {
            "originalFileName": "jane.json",
            "uploadedAt": "2026-01-02T03:04:05Z",
        },
    }


@pytest.fixture
def software_developer() -> OccupationRecord:
    """Software Developers (15-1252.00) with normalized requirements."""
    return OccupationRecord(
        code="15-1252.00",
        title="Software Developers",
        skills=[
            Skill(name="Programming", code="2.B.5.a", importance=90, level=80),
            Skill(
                name="Critical Thinking",
                code="2.A.2.a",
                importance=75,
                level=60,
                category="Basic Skills",
            ),
            Skill(name="Systems Analysis", code="2.B.4.g", importance=70, level=60),
        ],
        knowledge_areas=[
            KnowledgeArea(name="Computers and Electronics", level=75, importance=85),
        ],
        abilities=[
            Ability(name="Deductive Reasoning", level=60, importance=70),
        ],
        labor_market=LaborMarketData(employment_outlook="Average"),
    )


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={})
    client.get_token_summary.return_value = {"input": 0, "output": 0, "calls": []}
    return client


@pytest.fixture
def mock_onet_client() -> RateLimitedOccupationClient:
    """Create a mock O*NET client."""
    client = AsyncMock(spec=RateLimitedOccupationClient)
    client.track_requests.return_value.__enter__.return_value = RequestCounter(client=client)
    return client
