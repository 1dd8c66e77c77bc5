"""Transferable-skill analysis: LLM first, rule-based overlap as fallback."""

from __future__ import annotations

import asyncio
import logging

import anthropic
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from skill_roadmap.clients.llm_client import LLMClient
from skill_roadmap.errors import LLMResponseError
from skill_roadmap.models.gap import CurrentSkill, TransferInsight, TransferInsights
from skill_roadmap.models.occupation import Skill

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.5
DEFAULT_TIMEOUT = 30.0

SYSTEM_PROMPT = "You are a career transition expert analyzing transferable skills. Respond with JSON only."

PROMPT_TEMPLATE = """Analyze which skills transfer from the current role to the target role.

CURRENT ROLE: {current_role}
CURRENT ROLE SKILLS:
{current_skills}

TARGET ROLE: {target_role}
TARGET ROLE REQUIREMENTS (from O*NET):
{target_skills}

For each current skill, decide whether it transfers. Consider direct overlap,
adjacent skills (e.g. Python -> JavaScript), meta-skills (e.g. project
management -> leadership) and domain knowledge.

Return JSON in exactly this format:
{{
  "transferableSkills": [
    {{
      "skillName": "string",
      "currentLevel": 0-100,
      "applicabilityToTarget": 0-100,
      "transferRationale": "explanation",
      "confidence": 0-1
    }}
  ],
  "transferPatterns": ["pattern"]
}}

Only include skills with confidence >= 0.4."""


class _LLMInsight(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    skill_name: str = Field(min_length=1)
    current_level: float
    applicability_to_target: float
    transfer_rationale: str = Field(min_length=1)
    confidence: float

    @field_validator("current_level", "applicability_to_target")
    @classmethod
    def _clamp_percent(cls, v: float) -> float:
        return max(0.0, min(100.0, v))

    @field_validator("confidence")
    @classmethod
    def _clamp_unit(cls, v: float) -> float:
        return max(0.0, min(1.0, v))


class _LLMPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    transferable_skills: list[dict] = []
    transfer_patterns: list[str] = []


def skill_similarity(a: str, b: str) -> float:
    """1.0 exact, 0.9 containment, otherwise Jaccard overlap of words."""
    s1, s2 = a.lower().strip(), b.lower().strip()
    if s1 == s2:
        return 1.0
    if s1 and s2 and (s1 in s2 or s2 in s1):
        return 0.9
    words1, words2 = set(s1.split()), set(s2.split())
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


class TransferableSkillsMatcher:
    """Finds current skills that carry over to a target occupation.

    Results are memoized per instance by role pair and skill names. The
    rule-based fallback result is not memoized so a later LLM call can
    still improve on it.
    """

    def __init__(self, llm: LLMClient | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.llm = llm
        self.timeout = timeout
        self._memo: dict[str, TransferInsights] = {}

    @staticmethod
    def _memo_key(
        current_role: str,
        target_role: str,
        current: list[CurrentSkill],
        target: list[Skill],
    ) -> str:
        return "|".join([
            current_role.lower(),
            target_role.lower(),
            ",".join(sorted(s.name.lower() for s in current)),
            ",".join(sorted(s.name.lower() for s in target)),
        ])

    async def find_transferable_skills(
        self,
        current_skills: list[CurrentSkill],
        target_skills: list[Skill],
        current_role: str,
        target_role: str,
    ) -> TransferInsights:
        key = self._memo_key(current_role, target_role, current_skills, target_skills)
        if key in self._memo:
            logger.debug("Using memoized transferable-skills analysis")
            return self._memo[key]

        if self.llm is not None and current_skills and target_skills:
            try:
                result = await asyncio.wait_for(
                    self._llm_analysis(current_skills, target_skills, current_role, target_role),
                    timeout=self.timeout,
                )
            except (LLMResponseError, ValidationError, asyncio.TimeoutError) as exc:
                logger.warning("LLM transfer analysis failed, using baseline: %s", exc)
            except anthropic.APIError as exc:
                logger.warning("LLM transfer analysis unavailable, using baseline: %s", exc)
            else:
                self._memo[key] = result
                return result

        return self.baseline(current_skills, target_skills)

    async def _llm_analysis(
        self,
        current_skills: list[CurrentSkill],
        target_skills: list[Skill],
        current_role: str,
        target_role: str,
    ) -> TransferInsights:
        prompt = PROMPT_TEMPLATE.format(
            current_role=current_role or "Unknown",
            target_role=target_role,
            current_skills="\n".join(f"- {s.name} ({s.level}/100)" for s in current_skills),
            target_skills="\n".join(
                f"- {s.name} (Importance: {s.importance}/100, Level: {s.level}/100)"
                for s in target_skills
            ),
        )
        data = await self.llm.generate_json(
            prompt,
            system=SYSTEM_PROMPT,
            purpose="transfer_analysis",
            required_keys=("transferableSkills",),
        )
        payload = _LLMPayload.model_validate(data)

        insights = []
        for raw in payload.transferable_skills:
            try:
                item = _LLMInsight.model_validate(raw)
            except ValidationError:
                logger.debug("Dropping malformed transfer insight: %r", raw)
                continue
            insights.append(
                TransferInsight(
                    skill_name=item.skill_name,
                    current_level=round(item.current_level),
                    applicability_to_target=round(item.applicability_to_target),
                    transfer_rationale=item.transfer_rationale,
                    confidence=item.confidence,
                )
            )
        return TransferInsights(
            transferable_skills=insights,
            transfer_patterns=payload.transfer_patterns,
            source="llm",
        )

    @staticmethod
    def baseline(current_skills: list[CurrentSkill], target_skills: list[Skill]) -> TransferInsights:
        """Name-overlap matching against O*NET skills, sorted by confidence."""
        insights = []
        for current in current_skills:
            for target in target_skills:
                similarity = skill_similarity(current.name, target.name)
                if similarity <= MATCH_THRESHOLD:
                    continue
                rationale = (
                    f"Direct match with target skill: {target.name}"
                    if similarity > 0.9
                    else f"Similar to target skill: {target.name}"
                )
                insights.append(
                    TransferInsight(
                        skill_name=current.name,
                        current_level=current.level,
                        applicability_to_target=int(similarity * target.importance + 0.5),
                        transfer_rationale=rationale,
                        confidence=similarity,
                    )
                )
        insights.sort(key=lambda i: -i.confidence)
        return TransferInsights(
            transferable_skills=insights,
            transfer_patterns=["Direct skill overlap"] if insights else [],
            source="baseline",
        )
