"""Data models for the skill-gap roadmap pipeline."""

from skill_roadmap.models.gap import (
    Criticality,
    CurrentSkill,
    GapAnalysis,
    LearningRecord,
    RoadmapPhase,
    SkillGap,
    TimeEstimate,
    TransferableSkill,
    TransferInsight,
    TransferInsights,
)
from skill_roadmap.models.occupation import (
    Ability,
    KnowledgeArea,
    LaborMarketData,
    OccupationRecord,
    OccupationResolution,
    OccupationSummary,
    Skill,
)
from skill_roadmap.models.resume import ResumeDocument, parse_resume_document
from skill_roadmap.models.scoring import CategoryScore, Recommendation, ScoreReport

__all__ = [
    "Ability",
    "CategoryScore",
    "Criticality",
    "CurrentSkill",
    "GapAnalysis",
    "KnowledgeArea",
    "LearningRecord",
    "LaborMarketData",
    "OccupationRecord",
    "OccupationResolution",
    "OccupationSummary",
    "Recommendation",
    "ResumeDocument",
    "RoadmapPhase",
    "ScoreReport",
    "Skill",
    "SkillGap",
    "TimeEstimate",
    "TransferableSkill",
    "TransferInsight",
    "TransferInsights",
    "parse_resume_document",
]
