"""Main pipeline: résumé + target role -> score, gaps and roadmap."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from skill_roadmap.cache.analysis_cache import ContentHashAnalysisCache
from skill_roadmap.cache.fallback_data import build_fallback_record
from skill_roadmap.cache.occupation_manager import OccupationCacheManager
from skill_roadmap.clients.llm_client import LLMClient
from skill_roadmap.config import AppConfig
from skill_roadmap.errors import InvalidInputError
from skill_roadmap.models.gap import CurrentSkill, GapAnalysis, TransferInsights, parse_current_skills
from skill_roadmap.models.occupation import OccupationResolution
from skill_roadmap.models.resume import parse_resume_document
from skill_roadmap.models.scoring import ScoreReport
from skill_roadmap.pipeline.gap_engine import (
    SkillGapEngine,
    calculate_learning_velocity,
    determine_transition_type,
)
from skill_roadmap.pipeline.skill_extractor import SkillExtractor
from skill_roadmap.pipeline.transferable_matcher import TransferableSkillsMatcher
from skill_roadmap.scoring.scorer import MultiFactorScorer
from skill_roadmap.telemetry.cost_calculator import calculate_cost
from skill_roadmap.telemetry.models import AnalysisRunLog
from skill_roadmap.telemetry.run_store import RunLogStore

logger = logging.getLogger(__name__)

SCORE_ANALYSIS_KIND = "resume_score"
UNKNOWN_OCCUPATION_CODE = "00-0000.00"


@dataclass
class PipelineResult:
    """Complete result of one skill-gap analysis."""

    occupation: OccupationResolution
    score: ScoreReport
    score_cached: bool
    current_skills: list[CurrentSkill]
    skill_source: str
    gap_analysis: GapAnalysis
    transfer_insights: TransferInsights
    transition_type: str
    warnings: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def degraded(self) -> bool:
        return self.occupation.degraded


class SkillGapPipeline:
    """Coordinates occupation lookup, scoring, skill extraction and gap analysis.

    Only invalid input is fatal. Every data-availability failure degrades
    to cached or fallback data and is reported in ``warnings``.
    """

    def __init__(
        self,
        manager: OccupationCacheManager,
        *,
        analysis_cache: ContentHashAnalysisCache | None = None,
        llm: LLMClient | None = None,
        run_store: RunLogStore | None = None,
        config: AppConfig | None = None,
    ):
        self.config = config or AppConfig()
        self.manager = manager
        self.analysis_cache = analysis_cache
        self.llm = llm
        self.run_store = run_store
        self.scorer = MultiFactorScorer(self.config.scoring)
        self.engine = SkillGapEngine(self.config.gap)
        self.extractor = SkillExtractor(llm, timeout=self.config.llm.timeout)
        self.matcher = TransferableSkillsMatcher(llm, timeout=self.config.llm.timeout)

    async def analyze(
        self,
        resume: Any,
        *,
        subject_id: str = "anonymous",
        occupation_code: str | None = None,
        target_role: str | None = None,
        current_role: str = "",
        current_skills: list | None = None,
        weekly_hours: float | None = None,
        learning_history: list | None = None,
        on_phase: Callable[[str, str], None] | None = None,
    ) -> PipelineResult:
        """Analyze a résumé against a target occupation.

        Args:
            resume: ResumeDocument, dict, or JSON text.
            subject_id: Owner of the résumé, used as the score-cache key.
            occupation_code: O*NET code. Takes precedence over target_role.
            target_role: Free-text role, resolved via occupation search.
            current_role: Current job title, used for transfer analysis.
            current_skills: Explicit skills; otherwise extracted from the résumé.
            weekly_hours: Study hours per week (config default when omitted).
            learning_history: LearningRecord items for learning velocity.
            on_phase: Optional callback(phase_name, detail) for progress.
        """
        start = time.monotonic()

        def _notify(phase: str, detail: str = "") -> None:
            if on_phase:
                on_phase(phase, detail)

        if not occupation_code and not target_role:
            raise InvalidInputError("Either occupation_code or target_role is required")
        document = parse_resume_document(resume)
        explicit_skills = parse_current_skills(current_skills) if current_skills is not None else None
        velocity = calculate_learning_velocity(learning_history or [])
        warnings: list[str] = []
        with self.manager.client.track_requests() as requests:
            _notify("occupation", occupation_code or target_role or "")
            resolution = await self._resolve_occupation(occupation_code, target_role, warnings)
            record = resolution.record
            if resolution.degraded:
                warnings.append(
                    f"Live occupation data unavailable for {record.code}; using generic profile"
                )
            warnings.extend(resolution.errors)

            _notify("score", "scoring résumé")
            score, score_cached = await self._score(subject_id, document)

            _notify("skills", "extracting current skills")
            if explicit_skills is not None:
                skills, skill_source = explicit_skills, "provided"
            else:
                skills, skill_source = await self.extractor.extract(document, record)
            if not skills:
                warnings.append("No current skills found; every requirement is treated as a gap")

            overrides = None
            if self.config.gap.fetch_skill_complexity and not resolution.degraded and record.skills:
                codes = [s.code for s in record.skills]
                overrides = dict(zip(codes, await self.manager.get_skill_complexities(codes)))

            _notify("gaps", record.title)
            gap_analysis = self.engine.analyze(
                skills,
                record,
                weekly_hours=weekly_hours,
                learning_velocity=velocity,
                complexity_overrides=overrides,
            )
            insights = await self.matcher.find_transferable_skills(
                skills, record.skills, current_role, record.title
            )
            transition = determine_transition_type(
                len(gap_analysis.critical_gaps), len(gap_analysis.transferable_skills)
            )

            elapsed = time.monotonic() - start
            _notify("done", f"{len(gap_analysis.gaps)} gaps, {elapsed:.1f}s")

            result = PipelineResult(
                occupation=resolution,
                score=score,
                score_cached=score_cached,
                current_skills=skills,
                skill_source=skill_source,
                gap_analysis=gap_analysis,
                transfer_insights=insights,
                transition_type=transition,
                warnings=warnings,
                elapsed_seconds=elapsed,
            )
        self._record_run(subject_id, result, requests.count)
        return result

    async def _resolve_occupation(
        self,
        occupation_code: str | None,
        target_role: str | None,
        warnings: list[str],
    ) -> OccupationResolution:
        if occupation_code:
            return await self.manager.resolve(occupation_code)
        matches = await self.manager.search_occupations(target_role)
        if not matches:
            warnings.append(f"No occupation matched {target_role!r}")
            logger.warning("No occupation matched %r; using fallback profile", target_role)
            return OccupationResolution(
                record=build_fallback_record(UNKNOWN_OCCUPATION_CODE, self.config.onet.cache_version),
                source="fallback",
            )
        logger.info("Resolved %r to %s (%s)", target_role, matches[0].code, matches[0].title)
        return await self.manager.resolve(matches[0].code)

    async def _score(self, subject_id: str, document) -> tuple[ScoreReport, bool]:
        def compute() -> dict:
            return self.scorer.score(document).model_dump(mode="json")

        if self.analysis_cache is None:
            return ScoreReport.model_validate(compute()), False
        # scores computed under other category weights live under another kind
        kind = f"{SCORE_ANALYSIS_KIND}:{self.scorer.config_digest}"
        cached = await self.analysis_cache.get_or_compute(
            subject_id, kind, document, compute, model="multi-factor-v1"
        )
        return ScoreReport.model_validate(cached.result), cached.cached

    def _record_run(self, subject_id: str, result: PipelineResult, onet_requests: int) -> None:
        if self.run_store is None:
            return
        tokens = self.llm.get_token_summary() if self.llm is not None else {"input": 0, "output": 0, "calls": []}
        gap = result.gap_analysis
        for purpose, totals in tokens.get("by_purpose", {}).items():
            logger.debug("LLM usage [%s]: %d calls, %d input, %d output tokens",
                         purpose, totals["calls"], totals["input"], totals["output"])
        log = AnalysisRunLog(
            subject_id=subject_id,
            occupation_code=gap.occupation_code,
            occupation_title=gap.occupation_title,
            occupation_source=result.occupation.source,
            score_cached=result.score_cached,
            overall_score=result.score.overall,
            gap_count=len(gap.gaps),
            critical_gap_count=len(gap.critical_gaps),
            transition_type=result.transition_type,
            onet_requests=onet_requests,
            total_input_tokens=tokens["input"],
            total_output_tokens=tokens["output"],
            estimated_cost_usd=calculate_cost(tokens["calls"]),
            elapsed_seconds=result.elapsed_seconds,
        )
        try:
            self.run_store.save_log(log)
        except sqlite3.Error as exc:
            logger.warning("Failed to record run log: %s", exc)
