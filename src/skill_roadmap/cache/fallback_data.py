"""Static occupation record served when cache and API both fail."""

from __future__ import annotations

from skill_roadmap.models.occupation import (
    Ability,
    KnowledgeArea,
    LaborMarketData,
    OccupationRecord,
    Skill,
)

FALLBACK_TITLE = "Software Developer"


def build_fallback_record(code: str, cache_version: str = "29.0") -> OccupationRecord:
    """A generic software-developer profile filed under the requested code.

    Never raises. The caller marks the resolution as degraded.
    """
    return OccupationRecord(
        code=code,
        title=FALLBACK_TITLE,
        skills=[
            Skill(name="Programming", code="2.B.5.a", importance=90, level=71),
            Skill(
                name="Critical Thinking",
                code="2.A.2.a",
                importance=85,
                level=71,
                category="Basic Skills",
            ),
            Skill(
                name="Complex Problem Solving",
                code="2.A.2.b",
                importance=85,
                level=71,
                category="Basic Skills",
            ),
        ],
        knowledge_areas=[
            KnowledgeArea(name="Computers and Electronics", level=85, importance=90),
            KnowledgeArea(name="Engineering and Technology", level=71, importance=80),
        ],
        abilities=[
            Ability(name="Deductive Reasoning", level=71, importance=85),
            Ability(name="Information Ordering", level=71, importance=80),
        ],
        labor_market=LaborMarketData(
            employment_outlook="Bright",
            median_salary=120000,
            growth_rate=22,
        ),
        cache_version=cache_version,
    )
