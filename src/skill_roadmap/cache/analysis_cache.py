"""SQLite cache of analysis results keyed by a content fingerprint."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import sqlite3
import time
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from skill_roadmap.errors import CacheStoreError
from skill_roadmap.utils.content_hash import compute_content_hash

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".skill-roadmap" / "analyses.db"
SCHEMA_VERSION = 1


@dataclass
class CachedAnalysis:
    result: dict
    content_hash: str
    cached: bool
    computed_at: float
    model: str | None = None


class ContentHashAnalysisCache:
    """Reuses analysis results until the analysed content actually changes.

    Entries are identified by ``(subject_id, analysis_kind, content_hash)``.
    Only the newest ``retention`` entries per subject and kind are kept.
    Cache failures are logged and never surface to the caller.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        *,
        retention: int = 5,
        schema_version: int = SCHEMA_VERSION,
        clock: Callable[[], float] = time.time,
    ):
        self.db_path = Path(db_path)
        self.retention = retention
        self.schema_version = schema_version
        self.clock = clock
        self._locks: dict[tuple[str, str, str], asyncio.Lock] = {}
        self._lock_users: dict[tuple[str, str, str], int] = {}
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._transaction("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS analysis_cache (
                    subject_id TEXT NOT NULL,
                    analysis_kind TEXT NOT NULL,
                    content_hash TEXT NOT NULL,
                    schema_version INTEGER NOT NULL,
                    model TEXT,
                    result_json TEXT NOT NULL,
                    computed_at REAL NOT NULL,
                    PRIMARY KEY (subject_id, analysis_kind, content_hash)
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_analysis_subject "
                "ON analysis_cache (subject_id, analysis_kind, computed_at)"
            )

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        conn = None
        try:
            conn = self._connect()
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise CacheStoreError(f"Analysis cache {action} failed: {exc}") from exc
        finally:
            if conn is not None:
                conn.close()

    @asynccontextmanager
    async def _fingerprint_lock(self, key: tuple[str, str, str]) -> AsyncIterator[None]:
        """Hold the lock for one fingerprint; dropped once nobody uses it."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def get_or_compute(
        self,
        subject_id: str,
        analysis_kind: str,
        content: Any,
        compute_fn: Callable[[], Any],
        model: str | None = None,
    ) -> CachedAnalysis:
        """Return the stored result for this content, computing it on a miss.

        ``compute_fn`` may be sync or async and must return a JSON-serializable
        dict. Concurrent callers with the same fingerprint wait on one lock,
        so the computation runs at most once per fingerprint.
        """
        content_hash = compute_content_hash(content)
        key = (subject_id, analysis_kind, content_hash)
        async with self._fingerprint_lock(key):
            cached = self._read(subject_id, analysis_kind, content_hash)
            if cached is not None:
                logger.debug("Analysis cache hit: %s/%s", subject_id, analysis_kind)
                return cached

            logger.debug("Analysis cache miss: %s/%s", subject_id, analysis_kind)
            result = compute_fn()
            if inspect.isawaitable(result):
                result = await result
            computed_at = self.clock()
            self._write(subject_id, analysis_kind, content_hash, result, computed_at, model)
            return CachedAnalysis(
                result=result,
                content_hash=content_hash,
                cached=False,
                computed_at=computed_at,
                model=model,
            )

    def _read(self, subject_id: str, kind: str, content_hash: str) -> CachedAnalysis | None:
        try:
            with self._transaction("read") as conn:
                row = conn.execute(
                    "SELECT result_json, computed_at, model FROM analysis_cache "
                    "WHERE subject_id = ? AND analysis_kind = ? AND content_hash = ? "
                    "AND schema_version = ?",
                    (subject_id, kind, content_hash, self.schema_version),
                ).fetchone()
        except CacheStoreError as exc:
            logger.warning("%s; recomputing", exc)
            return None
        if row is None:
            return None
        try:
            result = json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Corrupt analysis cache entry for %s/%s", subject_id, kind)
            return None
        return CachedAnalysis(
            result=result,
            content_hash=content_hash,
            cached=True,
            computed_at=row[1],
            model=row[2],
        )

    def _write(
        self,
        subject_id: str,
        kind: str,
        content_hash: str,
        result: dict,
        computed_at: float,
        model: str | None,
    ) -> None:
        try:
            payload = json.dumps(result, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.warning("Analysis result for %s/%s is not serializable: %s", subject_id, kind, exc)
            return
        try:
            with self._transaction("write") as conn:
                conn.execute(
                    """INSERT OR REPLACE INTO analysis_cache
                       (subject_id, analysis_kind, content_hash, schema_version,
                        model, result_json, computed_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?)""",
                    (subject_id, kind, content_hash, self.schema_version, model, payload, computed_at),
                )
                # keep only the newest entries for this subject and kind
                conn.execute(
                    """DELETE FROM analysis_cache
                       WHERE subject_id = ? AND analysis_kind = ?
                       AND content_hash NOT IN (
                           SELECT content_hash FROM analysis_cache
                           WHERE subject_id = ? AND analysis_kind = ?
                           ORDER BY computed_at DESC, rowid DESC LIMIT ?
                       )""",
                    (subject_id, kind, subject_id, kind, self.retention),
                )
        except CacheStoreError as exc:
            logger.warning("%s; result not cached", exc)

    def latest(self, subject_id: str, analysis_kind: str) -> CachedAnalysis | None:
        """Most recently computed entry, regardless of content hash."""
        entries = self.history(subject_id, analysis_kind, limit=1)
        return entries[0] if entries else None

    def history(
        self, subject_id: str, analysis_kind: str, limit: int | None = None
    ) -> list[CachedAnalysis]:
        """Stored entries, newest first."""
        sql = (
            "SELECT result_json, content_hash, computed_at, model FROM analysis_cache "
            "WHERE subject_id = ? AND analysis_kind = ? "
            "ORDER BY computed_at DESC, rowid DESC"
        )
        params: tuple = (subject_id, analysis_kind)
        if limit is not None:
            sql += " LIMIT ?"
            params += (limit,)
        with self._transaction("history") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [
            CachedAnalysis(
                result=json.loads(result_json),
                content_hash=content_hash,
                cached=True,
                computed_at=computed_at,
                model=model,
            )
            for result_json, content_hash, computed_at, model in rows
        ]

    def has_entry(self, subject_id: str, analysis_kind: str, content_hash: str) -> bool:
        with self._transaction("lookup") as conn:
            row = conn.execute(
                "SELECT 1 FROM analysis_cache "
                "WHERE subject_id = ? AND analysis_kind = ? AND content_hash = ? "
                "AND schema_version = ?",
                (subject_id, analysis_kind, content_hash, self.schema_version),
            ).fetchone()
        return row is not None

    def clear(self) -> int:
        with self._transaction("clear") as conn:
            return conn.execute("DELETE FROM analysis_cache").rowcount

    def stats(self) -> dict:
        with self._transaction("stats") as conn:
            total, subjects = conn.execute(
                "SELECT COUNT(*), COUNT(DISTINCT subject_id) FROM analysis_cache"
            ).fetchone()
        return {"total": total, "subjects": subjects}
