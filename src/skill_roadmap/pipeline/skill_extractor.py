"""Extract current skills from a résumé document."""

from __future__ import annotations

import asyncio
import logging
import re

import anthropic
from pydantic import BaseModel, ValidationError

from skill_roadmap.clients.llm_client import LLMClient
from skill_roadmap.errors import LLMResponseError, SkillParseError
from skill_roadmap.models.gap import CurrentSkill, parse_current_skills
from skill_roadmap.models.occupation import OccupationRecord
from skill_roadmap.models.resume import ResumeDocument
from skill_roadmap.pipeline.gap_engine import SYNONYM_GROUPS, normalize_skill_name

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You extract skills from résumés. Respond with JSON only."

PROMPT_TEMPLATE = """List the professional skills evidenced in this résumé.

Rate each as beginner, intermediate, advanced or expert based on the
evidence (years, scope, results). Prefer names matching these target
requirements where the résumé supports them:
{requirements}

RÉSUMÉ:
{resume}

Return JSON: {{"skills": [{{"name": "string", "level": "intermediate"}}]}}"""


class _ExtractedSkills(BaseModel):
    skills: list[dict] = []


class SkillExtractor:
    """Structured skills win; plain text goes to the LLM, then keyword spotting."""

    def __init__(self, llm: LLMClient | None = None, timeout: float = 30.0):
        self.llm = llm
        self.timeout = timeout

    async def extract(
        self, document: ResumeDocument, occupation: OccupationRecord | None = None
    ) -> tuple[list[CurrentSkill], str]:
        """Return the skills and how they were obtained.

        Source is "structured", "llm", "keywords" or "none". Malformed
        structured skills raise SkillParseError.
        """
        if document.skills:
            raw = [s.model_dump(exclude_none=True) for s in document.skills]
            return parse_current_skills(raw), "structured"

        text = document.full_text()
        if not text.strip():
            return [], "none"

        if self.llm is not None:
            try:
                skills = await asyncio.wait_for(self._llm_extract(text, occupation), self.timeout)
            except (LLMResponseError, ValidationError, asyncio.TimeoutError) as exc:
                logger.warning("LLM skill extraction failed, spotting keywords: %s", exc)
            except anthropic.APIError as exc:
                logger.warning("LLM skill extraction unavailable, spotting keywords: %s", exc)
            else:
                if skills:
                    return skills, "llm"

        return self.spot_keywords(text, occupation), "keywords"

    async def _llm_extract(
        self, text: str, occupation: OccupationRecord | None
    ) -> list[CurrentSkill]:
        names = _requirement_names(occupation)
        prompt = PROMPT_TEMPLATE.format(
            requirements="\n".join(f"- {n}" for n in names) or "- (none)",
            resume=text[:12000],
        )
        data = await self.llm.generate_json(
            prompt, system=SYSTEM_PROMPT, purpose="skill_extraction", required_keys=("skills",)
        )
        payload = _ExtractedSkills.model_validate(data)
        skills = []
        for item in payload.skills:
            try:
                skills.extend(parse_current_skills([item]))
            except SkillParseError:
                logger.debug("Dropping malformed extracted skill: %r", item)
        return skills

    @staticmethod
    def spot_keywords(text: str, occupation: OccupationRecord | None) -> list[CurrentSkill]:
        """Requirement names (and their synonyms) mentioned in the text.

        Every hit is rated intermediate.
        """
        haystack = normalize_skill_name(text)
        found: list[CurrentSkill] = []
        for name in _requirement_names(occupation):
            normalized = normalize_skill_name(name)
            group = next((g for g in SYNONYM_GROUPS if normalized in g), frozenset({normalized}))
            if any(_mentions(haystack, term) for term in group):
                found.append(CurrentSkill(name=name, level=50))
        return found


def _requirement_names(occupation: OccupationRecord | None) -> list[str]:
    if occupation is None:
        return []
    names = [s.name for s in occupation.skills]
    names += [k.name for k in occupation.knowledge_areas]
    names += [a.name for a in occupation.abilities]
    return names


def _mentions(haystack: str, term: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(term)}(?!\w)", haystack) is not None
