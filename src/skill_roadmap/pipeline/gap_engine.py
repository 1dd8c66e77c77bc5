"""Skill-gap classification, priority scoring and roadmap phasing."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

from skill_roadmap.config import GapConfig
from skill_roadmap.errors import InvalidInputError, SkillParseError
from skill_roadmap.models.gap import (
    Criticality,
    CurrentSkill,
    GapAnalysis,
    LearningRecord,
    RoadmapPhase,
    SkillGap,
    TimeEstimate,
    TransferableSkill,
    parse_current_skills,
)
from skill_roadmap.models.occupation import OccupationRecord

logger = logging.getLogger(__name__)

# (base hours, low, high) per complexity tier
COMPLEXITY_HOURS = {
    "basic": (60, 40, 80),
    "intermediate": (120, 80, 160),
    "advanced": (280, 160, 400),
}

PHASES = {
    1: ("0-3 months", "Critical Skills Foundation"),
    2: ("3-6 months", "Core Competencies Development"),
    3: ("6-12 months", "Advanced Skills Mastery"),
}

TECHNICAL_DEMAND = 0.8
DEFAULT_DEMAND = 0.5
BRIGHT_OUTLOOK_BONUS = 0.1

# Names in one group count as the same skill when matching a résumé.
SYNONYM_GROUPS: list[frozenset[str]] = [
    frozenset({"programming", "coding", "software development", "software engineering"}),
    frozenset({"critical thinking", "analytical thinking", "analytical skills"}),
    frozenset({"complex problem solving", "problem solving", "troubleshooting"}),
    frozenset({"speaking", "oral communication", "public speaking", "presentation"}),
    frozenset({"writing", "technical writing", "documentation"}),
    frozenset({"active listening", "listening"}),
    frozenset({"mathematics", "math", "statistics"}),
    frozenset({"systems analysis", "system design", "systems design", "software architecture"}),
    frozenset({"management of personnel resources", "people management", "team leadership"}),
    frozenset({"coordination", "collaboration", "teamwork"}),
    frozenset({"computers and electronics", "computer science", "information technology"}),
    frozenset({"active learning", "continuous learning", "self learning"}),
    frozenset({"judgment and decision making", "decision making"}),
    frozenset({"time management", "prioritization"}),
]

_NON_WORD = re.compile(r"[^\w+#./ ]+")
_SPACES = re.compile(r"\s+")


def normalize_skill_name(name: str) -> str:
    return _SPACES.sub(" ", _NON_WORD.sub(" ", name.lower())).strip()


def _synonyms(name: str) -> frozenset[str]:
    for group in SYNONYM_GROUPS:
        if name in group:
            return group
    return frozenset({name})


def _contains(a: str, b: str) -> bool:
    """Whole-word containment of one name in the other."""
    if len(a) < 3 or len(b) < 3:
        return False
    return f" {a} " in f" {b} " or f" {b} " in f" {a} "


@dataclass
class _Requirement:
    name: str
    code: str | None
    requirement_type: str
    category: str
    importance: int
    target_level: int


def _requirements(occupation: OccupationRecord) -> list[_Requirement]:
    reqs = [
        _Requirement(s.name, s.code, "skill", s.category, s.importance, s.level)
        for s in occupation.skills
    ]
    reqs.extend(
        _Requirement(k.name, None, "knowledge", "Knowledge", k.importance, k.level)
        for k in occupation.knowledge_areas
    )
    reqs.extend(
        _Requirement(a.name, None, "ability", "Abilities", a.importance, a.level)
        for a in occupation.abilities
    )
    return reqs


class SkillGapEngine:
    """Compares current skills against an occupation's requirements.

    ``analyze`` is pure: the same inputs always produce the same analysis.
    """

    def __init__(self, config: GapConfig | None = None):
        self.config = config or GapConfig()

    def analyze(
        self,
        current_skills: Iterable,
        occupation: OccupationRecord,
        *,
        weekly_hours: float | None = None,
        learning_velocity: float = 1.0,
        complexity_overrides: dict[str, float] | None = None,
    ) -> GapAnalysis:
        """Build ranked gaps, transferable skills and a phased roadmap.

        ``current_skills`` accepts CurrentSkill objects, ``{"name", "level"}``
        mappings or bare names. ``complexity_overrides`` maps skill codes to a
        0-100 complexity fetched from O*NET; when present it picks the time
        tier instead of the target level.
        """
        weekly_hours = self.config.default_weekly_hours if weekly_hours is None else weekly_hours
        if weekly_hours <= 0:
            raise InvalidInputError("weekly_hours must be > 0")
        if learning_velocity < 0:
            raise InvalidInputError("learning_velocity must be >= 0")
        skills = parse_current_skills(list(current_skills))
        overrides = complexity_overrides or {}
        bright = occupation.labor_market.employment_outlook.strip().lower() == "bright"

        gaps: list[SkillGap] = []
        transferable: list[TransferableSkill] = []
        for req in _requirements(occupation):
            current, matched_from = self._match(req.name, skills)
            gap = max(0, req.target_level - current)
            if gap == 0:
                if current > 0:
                    transferable.append(
                        TransferableSkill(
                            skill_name=req.name,
                            current_level=current,
                            target_level=req.target_level,
                            matched_from=matched_from,
                        )
                    )
                continue

            demand = self.market_demand(req.category, bright=bright)
            priority = self.priority_score(req.importance, gap, req.target_level, demand)
            criticality = self.classify(req.importance)
            complexity_level = overrides.get(req.code) if req.code else None
            estimate = self.estimate_time(
                target_level=req.target_level,
                current_level=current,
                weekly_hours=weekly_hours,
                learning_velocity=learning_velocity,
                complexity_level=complexity_level,
            )
            gaps.append(
                SkillGap(
                    skill_name=req.name,
                    skill_code=req.code,
                    requirement_type=req.requirement_type,
                    category=req.category,
                    importance=req.importance,
                    current_level=current,
                    target_level=req.target_level,
                    gap=gap,
                    criticality=criticality,
                    priority_score=priority,
                    market_demand=demand,
                    time_estimate=estimate,
                    transferable_from=matched_from,
                    quick_win=self.is_quick_win(criticality, priority, estimate.hours),
                    phase=self.assign_phase(priority, estimate.hours),
                )
            )

        gaps.sort(key=lambda g: (-g.priority_score, -g.importance, g.skill_name))
        transferable.sort(key=lambda t: (-t.current_level, t.skill_name))
        logger.info(
            "Gap analysis for %s: %d gaps, %d transferable",
            occupation.code,
            len(gaps),
            len(transferable),
        )
        return GapAnalysis(
            occupation_code=occupation.code,
            occupation_title=occupation.title,
            gaps=gaps,
            transferable_skills=transferable,
            roadmap=self.build_roadmap(gaps, weekly_hours),
            weekly_hours=weekly_hours,
            learning_velocity=learning_velocity,
        )

    # --- steps ---

    @staticmethod
    def _match(requirement: str, skills: list[CurrentSkill]) -> tuple[int, list[str]]:
        """Best current level for a requirement and the skill names that matched."""
        target = normalize_skill_name(requirement)
        group = _synonyms(target)
        best = 0
        matched: list[str] = []
        for skill in skills:
            name = normalize_skill_name(skill.name)
            if name in group or _contains(name, target):
                matched.append(skill.name)
                best = max(best, skill.level)
        return best, matched

    def classify(self, importance: int) -> Criticality:
        if importance >= self.config.critical_threshold:
            return Criticality.CRITICAL
        if importance >= self.config.important_threshold:
            return Criticality.IMPORTANT
        return Criticality.NICE_TO_HAVE

    @staticmethod
    def market_demand(category: str, *, bright: bool = False) -> float:
        demand = TECHNICAL_DEMAND if "technical" in category.lower() else DEFAULT_DEMAND
        if bright:
            demand += BRIGHT_OUTLOOK_BONUS
        return round(min(1.0, demand), 2)

    def priority_score(self, importance: int, gap: int, target_level: int, demand: float) -> float:
        """Weighted 0-100 priority. Strictly increasing in importance and gap."""
        c = self.config
        raw = 100 * (
            c.importance_weight * importance / 100
            + c.gap_weight * gap / 100
            + c.demand_weight * demand
            + c.capital_weight * (importance / 100) * (target_level / 100)
        )
        return round(max(0.0, min(100.0, raw)), 1)

    @staticmethod
    def estimate_time(
        *,
        target_level: int,
        current_level: int,
        weekly_hours: float,
        learning_velocity: float = 1.0,
        complexity_level: float | None = None,
    ) -> TimeEstimate:
        # tiers are defined on the 0-7 O*NET level scale
        level_7 = (target_level if complexity_level is None else complexity_level) / 100 * 7
        if level_7 <= 3:
            complexity = "basic"
        elif level_7 <= 5:
            complexity = "intermediate"
        else:
            complexity = "advanced"
        base, low, high = COMPLEXITY_HOURS[complexity]

        if learning_velocity > 1.2:
            velocity_mult = 0.8
        elif learning_velocity >= 0.8:
            velocity_mult = 1.0
        else:
            velocity_mult = 1.3

        gap_pct = (target_level - current_level) / target_level * 100 if target_level else 0
        if gap_pct <= 30:
            gap_mult = 1.0
        elif gap_pct <= 60:
            gap_mult = 1.5
        else:
            gap_mult = 2.0

        factor = velocity_mult * gap_mult
        hours = int(math.floor(base * factor + 0.5))
        return TimeEstimate(
            hours=hours,
            hours_low=int(math.floor(low * factor + 0.5)),
            hours_high=int(math.floor(high * factor + 0.5)),
            weeks=math.ceil(hours / weekly_hours),
            complexity=complexity,
        )

    def assign_phase(self, priority: float, hours: int) -> int:
        c = self.config
        if priority >= c.phase1_priority or hours <= c.phase1_hours:
            return 1
        if priority >= c.phase2_priority or hours <= c.phase2_hours:
            return 2
        return 3

    def is_quick_win(self, criticality: Criticality, priority: float, hours: int) -> bool:
        c = self.config
        if criticality is Criticality.NICE_TO_HAVE:
            return priority >= c.nice_quick_win_priority and hours <= c.nice_quick_win_hours
        return priority >= c.quick_win_priority and hours <= c.quick_win_hours

    @staticmethod
    def build_roadmap(gaps: list[SkillGap], weekly_hours: float) -> list[RoadmapPhase]:
        """Group gaps by phase; ``gaps`` must already be in priority order."""
        roadmap = []
        for phase, (horizon, title) in PHASES.items():
            members = [g for g in gaps if g.phase == phase]
            if not members:
                continue
            total = sum(g.time_estimate.hours for g in members)
            roadmap.append(
                RoadmapPhase(
                    phase=phase,
                    horizon=horizon,
                    milestone_title=title,
                    skills=[g.skill_name for g in members],
                    total_hours=total,
                    estimated_weeks=math.ceil(total / weekly_hours),
                )
            )
        return roadmap


def calculate_learning_velocity(history: Iterable[LearningRecord | dict]) -> float:
    """Average of time_spent / estimated_time_to_target over completed items.

    1.0 means average; above 1.2 is fast, below 0.8 slow. Empty or unusable
    history yields 1.0.
    """
    records = []
    for item in history:
        try:
            records.append(
                item if isinstance(item, LearningRecord) else LearningRecord.model_validate(item)
            )
        except ValueError as exc:
            raise SkillParseError(f"Invalid learning history entry: {exc}") from exc
    ratios = [
        r.time_spent / r.estimated_time_to_target
        for r in records
        if r.completed and r.estimated_time_to_target > 0
    ]
    if not ratios:
        return 1.0
    return round(sum(ratios) / len(ratios), 2)


def determine_transition_type(critical_gap_count: int, transferable_count: int) -> str:
    """Classify a move as lateral, upward or a career change."""
    ratio = critical_gap_count / transferable_count if transferable_count else critical_gap_count
    if ratio > 2:
        return "career-change"
    if ratio > 1:
        return "upward"
    return "lateral"
