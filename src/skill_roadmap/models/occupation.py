"""Pydantic models for O*NET occupation data."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field


class Skill(BaseModel):
    name: str
    code: str
    importance: int = Field(ge=0, le=100)
    level: int = Field(ge=0, le=100)
    category: str = "Technical Skills"


class KnowledgeArea(BaseModel):
    name: str
    level: int = Field(ge=0, le=100)
    importance: int = Field(ge=0, le=100)


class Ability(BaseModel):
    name: str
    level: int = Field(ge=0, le=100)
    importance: int = Field(ge=0, le=100)


class LaborMarketData(BaseModel):
    employment_outlook: str = "Average"
    median_salary: float | None = None
    growth_rate: float | None = None


class OccupationRecord(BaseModel):
    """Normalized occupation requirements. All levels and importances are 0-100."""

    code: str
    title: str
    skills: list[Skill] = []
    knowledge_areas: list[KnowledgeArea] = []
    abilities: list[Ability] = []
    labor_market: LaborMarketData = Field(default_factory=LaborMarketData)
    cache_version: str = "29.0"
    created_at: float | None = None  # epoch seconds, set by the store
    expires_at: float | None = None

    @property
    def requirement_count(self) -> int:
        return len(self.skills) + len(self.knowledge_areas) + len(self.abilities)


class OccupationSummary(BaseModel):
    code: str
    title: str
    description: str = ""


@dataclass
class OccupationResolution:
    """Where an occupation record came from and what failed on the way."""

    record: OccupationRecord
    source: str  # "cache" | "api" | "fallback"
    errors: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.source == "fallback"
