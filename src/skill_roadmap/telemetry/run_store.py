"""SQLite-backed store of pipeline run logs."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from skill_roadmap.telemetry.models import AnalysisRunLog

DEFAULT_DB_PATH = Path.home() / ".skill-roadmap" / "runs.db"

_COLUMNS = (
    "id",
    "subject_id",
    "timestamp",
    "occupation_code",
    "occupation_title",
    "occupation_source",
    "score_cached",
    "overall_score",
    "gap_count",
    "critical_gap_count",
    "transition_type",
    "onet_requests",
    "total_input_tokens",
    "total_output_tokens",
    "estimated_cost_usd",
    "elapsed_seconds",
    "success",
    "error_message",
)


class RunLogStore:
    """Run logs in WAL mode, one connection per operation."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS run_logs (
                    id TEXT PRIMARY KEY,
                    subject_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    occupation_code TEXT,
                    occupation_title TEXT,
                    occupation_source TEXT,
                    score_cached INTEGER NOT NULL DEFAULT 0,
                    overall_score INTEGER,
                    gap_count INTEGER NOT NULL DEFAULT 0,
                    critical_gap_count INTEGER NOT NULL DEFAULT 0,
                    transition_type TEXT,
                    onet_requests INTEGER NOT NULL DEFAULT 0,
                    total_input_tokens INTEGER NOT NULL DEFAULT 0,
                    total_output_tokens INTEGER NOT NULL DEFAULT 0,
                    estimated_cost_usd REAL NOT NULL DEFAULT 0.0,
                    elapsed_seconds REAL NOT NULL DEFAULT 0.0,
                    success INTEGER NOT NULL DEFAULT 1,
                    error_message TEXT
                )
            """)

    def save_log(self, log: AnalysisRunLog) -> None:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO run_logs ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                (
                    log.id,
                    log.subject_id,
                    log.timestamp.isoformat(),
                    log.occupation_code,
                    log.occupation_title,
                    log.occupation_source,
                    1 if log.score_cached else 0,
                    log.overall_score,
                    log.gap_count,
                    log.critical_gap_count,
                    log.transition_type,
                    log.onet_requests,
                    log.total_input_tokens,
                    log.total_output_tokens,
                    log.estimated_cost_usd,
                    log.elapsed_seconds,
                    1 if log.success else 0,
                    log.error_message,
                ),
            )

    def get_logs(self, subject_id: str | None = None, limit: int = 50) -> list[AnalysisRunLog]:
        """Newest first, optionally for one subject."""
        sql = f"SELECT {', '.join(_COLUMNS)} FROM run_logs"
        params: tuple = ()
        if subject_id is not None:
            sql += " WHERE subject_id = ?"
            params = (subject_id,)
        sql += " ORDER BY timestamp DESC LIMIT ?"
        with self._connect() as conn:
            rows = conn.execute(sql, params + (limit,)).fetchall()
        return [self._row_to_log(row) for row in rows]

    def get_stats(self) -> dict:
        """Aggregates across all runs."""
        with self._connect() as conn:
            row = conn.execute(
                """SELECT
                       COUNT(*),
                       SUM(CASE WHEN occupation_source = 'cache' THEN 1 ELSE 0 END),
                       SUM(CASE WHEN occupation_source = 'fallback' THEN 1 ELSE 0 END),
                       SUM(score_cached),
                       SUM(estimated_cost_usd),
                       AVG(overall_score),
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END)
                   FROM run_logs"""
            ).fetchone()
        total = row[0] or 0

        def rate(n: int | None) -> float:
            return (n or 0) / total * 100 if total else 0.0

        return {
            "total_runs": total,
            "occupation_cache_hit_rate": rate(row[1]),
            "degraded_rate": rate(row[2]),
            "score_cache_hit_rate": rate(row[3]),
            "total_cost_usd": row[4] or 0.0,
            "avg_overall_score": round(row[5], 1) if row[5] is not None else None,
            "success_rate": rate(row[6]),
        }

    @staticmethod
    def _row_to_log(row: tuple) -> AnalysisRunLog:
        data = dict(zip(_COLUMNS, row))
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        data["score_cached"] = bool(data["score_cached"])
        data["success"] = bool(data["success"])
        return AnalysisRunLog(**data)
