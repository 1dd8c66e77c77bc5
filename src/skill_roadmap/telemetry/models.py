"""Run telemetry models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class AnalysisRunLog(BaseModel):
    """One pipeline run: what was resolved, from where, and at what cost."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    subject_id: str = "anonymous"
    timestamp: datetime = Field(default_factory=datetime.now)
    occupation_code: str | None = None
    occupation_title: str | None = None
    occupation_source: str | None = None  # "cache" | "api" | "fallback"
    score_cached: bool = False
    overall_score: int | None = None
    gap_count: int = 0
    critical_gap_count: int = 0
    transition_type: str | None = None
    onet_requests: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    elapsed_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None

    @property
    def degraded(self) -> bool:
        return self.occupation_source == "fallback"
