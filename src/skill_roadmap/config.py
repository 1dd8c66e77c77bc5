"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml


@dataclass(frozen=True)
class OnetConfig:
    base_url: str = "https://services.onetcenter.org/ws"
    min_request_interval_ms: int = 200
    timeout: float = 10.0
    batch_size: int = 5
    search_limit: int = 20
    cache_version: str = "29.0"

    def __post_init__(self) -> None:
        if self.min_request_interval_ms < 0:
            raise ValueError("onet.min_request_interval_ms must be >= 0")
        if not 0 < self.timeout <= 120:
            raise ValueError("onet.timeout must be between 0 and 120 seconds")
        if not 1 <= self.batch_size <= 50:
            raise ValueError("onet.batch_size must be between 1 and 50")


@dataclass(frozen=True)
class CacheConfig:
    ttl_days: int = 30
    db_path: str = "~/.skill-roadmap/cache.db"
    analysis_db_path: str = "~/.skill-roadmap/analyses.db"
    runs_db_path: str = "~/.skill-roadmap/runs.db"
    analysis_retention: int = 5

    def __post_init__(self) -> None:
        if not 0 <= self.ttl_days <= 365:
            raise ValueError("cache.ttl_days must be between 0 and 365")
        if self.analysis_retention < 1:
            raise ValueError("cache.analysis_retention must be >= 1")

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()

    @property
    def resolved_analysis_db_path(self) -> Path:
        return Path(self.analysis_db_path).expanduser()

    @property
    def resolved_runs_db_path(self) -> Path:
        return Path(self.runs_db_path).expanduser()


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    timeout: int = 30
    enabled: bool = True

    def __post_init__(self) -> None:
        if not 1 <= self.timeout <= 600:
            raise ValueError("llm.timeout must be between 1 and 600")


@dataclass(frozen=True)
class ScoringConfig:
    """Category weights for the résumé scorer. Must sum to 1.0."""

    content_quality: float = 0.20
    structural_integrity: float = 0.15
    professional_presentation: float = 0.15
    skills_alignment: float = 0.15
    experience_depth: float = 0.15
    career_progression: float = 0.10
    ats_optimization: float = 0.05
    industry_relevance: float = 0.05

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"scoring.{f.name} must be >= 0")
        total = sum(getattr(self, f.name) for f in fields(self))
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"scoring weights must sum to 1.0 (got {total:.3f})")

    def weights(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class GapConfig:
    critical_threshold: int = 80
    important_threshold: int = 50

    importance_weight: float = 0.45
    gap_weight: float = 0.30
    demand_weight: float = 0.15
    capital_weight: float = 0.10

    phase1_priority: float = 70
    phase1_hours: int = 40
    phase2_priority: float = 50
    phase2_hours: int = 120

    quick_win_priority: float = 70
    quick_win_hours: int = 40
    nice_quick_win_priority: float = 50
    nice_quick_win_hours: int = 20

    default_weekly_hours: float = 10.0
    fetch_skill_complexity: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.important_threshold < self.critical_threshold <= 100:
            raise ValueError(
                "gap thresholds must satisfy 0 < important_threshold < critical_threshold <= 100"
            )
        weights = (
            self.importance_weight,
            self.gap_weight,
            self.demand_weight,
            self.capital_weight,
        )
        if any(w < 0 for w in weights):
            raise ValueError("gap priority weights must be >= 0")
        if self.importance_weight <= 0 or self.gap_weight <= 0:
            raise ValueError("gap.importance_weight and gap.gap_weight must be > 0")
        if not math.isclose(sum(weights), 1.0, abs_tol=1e-6):
            raise ValueError("gap priority weights must sum to 1.0")
        if self.phase2_priority > self.phase1_priority or self.phase2_hours < self.phase1_hours:
            raise ValueError("phase 2 thresholds must be looser than phase 1 thresholds")
        if self.default_weekly_hours <= 0:
            raise ValueError("gap.default_weekly_hours must be > 0")


@dataclass(frozen=True)
class AppConfig:
    onet: OnetConfig = field(default_factory=OnetConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    gap: GapConfig = field(default_factory=GapConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        onet=OnetConfig(**raw.get("onet", {})),
        cache=CacheConfig(**raw.get("cache", {})),
        llm=LLMConfig(**raw.get("llm", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        gap=GapConfig(**raw.get("gap", {})),
    )
