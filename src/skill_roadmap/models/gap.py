"""Pydantic models for skill-gap analysis output."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from skill_roadmap.errors import SkillParseError

LEVEL_LABELS: dict[str, int] = {
    "beginner": 25,
    "intermediate": 50,
    "advanced": 75,
    "expert": 100,
}


class Criticality(str, Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    NICE_TO_HAVE = "nice-to-have"

    @property
    def rank(self) -> int:
        return {"critical": 3, "important": 2, "nice-to-have": 1}[self.value]


class CurrentSkill(BaseModel):
    """A skill the person already has, with a 0-100 level estimate."""

    name: str = Field(min_length=1)
    level: int = Field(ge=0, le=100)

    @field_validator("level", mode="before")
    @classmethod
    def _label_to_level(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            if key in LEVEL_LABELS:
                return LEVEL_LABELS[key]
            if key.isdigit():
                return int(key)
            raise ValueError(f"unknown skill level label: {value!r}")
        return value


def parse_current_skills(items: list) -> list[CurrentSkill]:
    """Validate a raw current-skill list.

    Each item is a CurrentSkill, a ``{"name", "level"}`` mapping, or a bare
    skill name (treated as intermediate). Anything else is a SkillParseError.
    """
    if not isinstance(items, list):
        raise SkillParseError(f"Current skills must be a list, got {type(items).__name__}")
    skills: list[CurrentSkill] = []
    for i, item in enumerate(items):
        if isinstance(item, CurrentSkill):
            skills.append(item)
            continue
        if isinstance(item, str):
            item = {"name": item, "level": "intermediate"}
        if not isinstance(item, dict):
            raise SkillParseError(f"Skill #{i} must be an object, got {type(item).__name__}")
        if item.get("level") is None:
            item = {**item, "level": "intermediate"}
        try:
            skills.append(CurrentSkill.model_validate(item))
        except ValueError as exc:
            raise SkillParseError(f"Skill #{i} is invalid: {exc}") from exc
    return skills


class TimeEstimate(BaseModel):
    hours: int
    hours_low: int
    hours_high: int
    weeks: int
    complexity: str  # "basic" | "intermediate" | "advanced"

    @property
    def label(self) -> str:
        if self.hours_low == self.hours_high:
            return f"{self.hours}h"
        return f"{self.hours_low}-{self.hours_high}h (~{self.weeks} wk)"


class SkillGap(BaseModel):
    skill_name: str
    skill_code: str | None = None
    requirement_type: str = "skill"  # "skill" | "knowledge" | "ability"
    category: str = ""
    importance: int
    current_level: int
    target_level: int
    gap: int
    criticality: Criticality
    priority_score: float
    market_demand: float
    time_estimate: TimeEstimate
    transferable_from: list[str] = []
    quick_win: bool = False
    phase: int = 3


class TransferableSkill(BaseModel):
    skill_name: str
    current_level: int
    target_level: int
    matched_from: list[str] = []


class RoadmapPhase(BaseModel):
    phase: int
    horizon: str
    milestone_title: str
    skills: list[str]
    total_hours: int
    estimated_weeks: int


class GapAnalysis(BaseModel):
    occupation_code: str
    occupation_title: str
    gaps: list[SkillGap] = []
    transferable_skills: list[TransferableSkill] = []
    roadmap: list[RoadmapPhase] = []
    weekly_hours: float
    learning_velocity: float = 1.0

    def _by(self, criticality: Criticality) -> list[SkillGap]:
        return [g for g in self.gaps if g.criticality == criticality]

    @property
    def critical_gaps(self) -> list[SkillGap]:
        return self._by(Criticality.CRITICAL)

    @property
    def important_gaps(self) -> list[SkillGap]:
        return self._by(Criticality.IMPORTANT)

    @property
    def nice_to_have_gaps(self) -> list[SkillGap]:
        return self._by(Criticality.NICE_TO_HAVE)

    @property
    def quick_wins(self) -> list[SkillGap]:
        return [g for g in self.gaps if g.quick_win]


class TransferInsight(BaseModel):
    """One transferable-skill finding from the LLM or the rule-based matcher."""

    skill_name: str
    current_level: int = Field(ge=0, le=100)
    applicability_to_target: int = Field(ge=0, le=100)
    transfer_rationale: str
    confidence: float = Field(ge=0.0, le=1.0)


class TransferInsights(BaseModel):
    transferable_skills: list[TransferInsight] = []
    transfer_patterns: list[str] = []
    source: str = "baseline"  # "llm" | "baseline"


class LearningRecord(BaseModel):
    """One entry of a person's learning history, used for velocity."""

    skill_name: str = ""
    status: str = "learning"  # "learning" | "practicing" | "mastered"
    progress: int = Field(default=0, ge=0, le=100)
    time_spent: float = Field(default=0.0, ge=0)  # hours
    estimated_time_to_target: float = Field(default=0.0, ge=0)

    @property
    def completed(self) -> bool:
        return self.status == "mastered" or (self.status == "practicing" and self.progress == 100)
