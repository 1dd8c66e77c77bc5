"""Tests for run telemetry: AnalysisRunLog, RunLogStore and cost estimates."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from skill_roadmap.telemetry.cost_calculator import MODEL_PRICING, calculate_cost
from skill_roadmap.telemetry.models import AnalysisRunLog
from skill_roadmap.telemetry.run_store import RunLogStore

HAIKU = "claude-haiku-4-5-20251001"
SONNET = "claude-sonnet-4-5-20250929"


class TestAnalysisRunLog:
    def test_create_minimal(self):
        log = AnalysisRunLog()
        assert log.subject_id == "anonymous"
        assert log.success is True
        assert log.gap_count == 0
        assert log.id

    def test_unique_ids(self):
        assert AnalysisRunLog().id != AnalysisRunLog().id

    def test_timestamp_auto(self):
        before = datetime.now()
        log = AnalysisRunLog()
        assert before <= log.timestamp <= datetime.now()

    def test_degraded(self):
        assert AnalysisRunLog(occupation_source="fallback").degraded
        assert not AnalysisRunLog(occupation_source="cache").degraded


@pytest.fixture
def store(tmp_path) -> RunLogStore:
    return RunLogStore(db_path=tmp_path / "runs.db")


class TestRunLogStore:
    def test_save_and_get(self, store):
        log = AnalysisRunLog(
            subject_id="jane",
            occupation_code="15-1252.00",
            occupation_title="Software Developers",
            occupation_source="api",
            score_cached=True,
            overall_score=72,
            gap_count=4,
            critical_gap_count=1,
            transition_type="lateral",
            onet_requests=4,
            total_input_tokens=1200,
            total_output_tokens=300,
            estimated_cost_usd=0.0027,
            elapsed_seconds=1.5,
        )
        store.save_log(log)
        [loaded] = store.get_logs()
        assert loaded == log

    def test_newest_first_and_limit(self, store):
        base = datetime(2026, 1, 1, 12, 0)
        for i in range(3):
            store.save_log(AnalysisRunLog(subject_id="jane", timestamp=base + timedelta(hours=i), gap_count=i))
        logs = store.get_logs(limit=2)
        assert [log.gap_count for log in logs] == [2, 1]

    def test_filter_by_subject(self, store):
        store.save_log(AnalysisRunLog(subject_id="jane"))
        store.save_log(AnalysisRunLog(subject_id="sam"))
        assert [log.subject_id for log in store.get_logs(subject_id="sam")] == ["sam"]

    def test_error_fields_round_trip(self, store):
        store.save_log(AnalysisRunLog(success=False, error_message="resume invalid"))
        [loaded] = store.get_logs()
        assert loaded.success is False
        assert loaded.error_message == "resume invalid"

    def test_stats_empty(self, store):
        stats = store.get_stats()
        assert stats["total_runs"] == 0
        assert stats["degraded_rate"] == 0.0
        assert stats["avg_overall_score"] is None

    def test_stats(self, store):
        store.save_log(AnalysisRunLog(occupation_source="cache", score_cached=True, overall_score=80,
                                      estimated_cost_usd=0.01))
        store.save_log(AnalysisRunLog(occupation_source="api", overall_score=60, estimated_cost_usd=0.02))
        store.save_log(AnalysisRunLog(occupation_source="fallback", overall_score=70))
        store.save_log(AnalysisRunLog(occupation_source="cache", success=False))

        stats = store.get_stats()
        assert stats["total_runs"] == 4
        assert stats["occupation_cache_hit_rate"] == 50.0
        assert stats["degraded_rate"] == 25.0
        assert stats["score_cache_hit_rate"] == 25.0
        assert stats["total_cost_usd"] == pytest.approx(0.03)
        assert stats["avg_overall_score"] == 70.0
        assert stats["success_rate"] == 75.0


class TestCostCalculator:
    def test_haiku_cost(self):
        assert calculate_cost([(HAIKU, 1_000_000, 1_000_000)]) == pytest.approx(6.00)

    def test_sonnet_cost(self):
        assert calculate_cost([(SONNET, 1_000_000, 1_000_000)]) == pytest.approx(18.00)

    def test_multiple_calls(self):
        calls = [(HAIKU, 1000, 500), (SONNET, 2000, 1000)]
        expected = (1000 / 1e6) * 1.00 + (500 / 1e6) * 5.00 + (2000 / 1e6) * 3.00 + (1000 / 1e6) * 15.00
        assert calculate_cost(calls) == pytest.approx(expected)

    def test_unknown_model_is_free(self):
        assert calculate_cost([("some-future-model", 1_000_000, 1_000_000)]) == 0.0

    def test_no_calls(self):
        assert calculate_cost([]) == 0.0

    def test_pricing_table_has_default_model(self):
        assert HAIKU in MODEL_PRICING
