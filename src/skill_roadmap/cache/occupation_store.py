"""SQLite cache for O*NET occupation records (TTL 30 days)."""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from skill_roadmap.errors import CacheStoreError
from skill_roadmap.models.occupation import OccupationRecord

DEFAULT_DB_PATH = Path.home() / ".skill-roadmap" / "cache.db"
DEFAULT_TTL_DAYS = 30


class OccupationCacheStore:
    """SQLite-backed occupation cache keyed by O*NET code.

    Expiry lives in the ``expires_at`` column and is enforced here, not by
    SQLite. ``clock`` returns epoch seconds and can be swapped in tests.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        ttl_days: int = DEFAULT_TTL_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        self.db_path = Path(db_path)
        self.ttl_seconds = ttl_days * 86400
        self.clock = clock
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._transaction("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS occupation_cache (
                    occupation_code TEXT PRIMARY KEY,
                    occupation_title TEXT NOT NULL,
                    record_json TEXT NOT NULL,
                    cache_version TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    expires_at REAL NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_occupation_expires_at "
                "ON occupation_cache (expires_at)"
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
            raise CacheStoreError(f"Occupation cache {action} failed: {exc}") from exc
        finally:
            if conn is not None:
                conn.close()

    @staticmethod
    def _row_to_record(record_json: str, created_at: float, expires_at: float) -> OccupationRecord:
        record = OccupationRecord.model_validate_json(record_json)
        return record.model_copy(update={"created_at": created_at, "expires_at": expires_at})

    def get(self, code: str) -> OccupationRecord | None:
        """Get a live occupation record, or None if absent or expired."""
        with self._transaction("get") as conn:
            row = conn.execute(
                "SELECT record_json, created_at, expires_at FROM occupation_cache "
                "WHERE occupation_code = ? AND expires_at > ?",
                (code.strip(), self.clock()),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_record(*row)

    def put(self, record: OccupationRecord) -> OccupationRecord:
        """Upsert the full record for its code with a fresh TTL.

        The first ``created_at`` for a code survives refreshes; every other
        column is replaced. Returns the record with its stored timestamps.
        """
        code = record.code.strip()
        now = self.clock()
        expires_at = now + self.ttl_seconds
        payload = record.model_dump_json(exclude={"created_at", "expires_at"})
        with self._transaction("put") as conn:
            conn.execute(
                """INSERT INTO occupation_cache
                   (occupation_code, occupation_title, record_json,
                    cache_version, created_at, expires_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(occupation_code) DO UPDATE SET
                       occupation_title = excluded.occupation_title,
                       record_json = excluded.record_json,
                       cache_version = excluded.cache_version,
                       expires_at = excluded.expires_at""",
                (code, record.title, payload, record.cache_version, now, expires_at),
            )
            created_at = conn.execute(
                "SELECT created_at FROM occupation_cache WHERE occupation_code = ?",
                (code,),
            ).fetchone()[0]
        return record.model_copy(update={"created_at": created_at, "expires_at": expires_at})

    def search_by_title_substring(self, query: str) -> list[OccupationRecord]:
        """Live records whose title contains ``query`` (case-insensitive). Unordered."""
        needle = query.strip().casefold()
        with self._transaction("search") as conn:
            rows = conn.execute(
                "SELECT occupation_title, record_json, created_at, expires_at "
                "FROM occupation_cache WHERE expires_at > ?",
                (self.clock(),),
            ).fetchall()
        return [
            self._row_to_record(record_json, created_at, expires_at)
            for title, record_json, created_at, expires_at in rows
            if needle in title.casefold()
        ]

    def sweep_expired(self) -> int:
        """Delete every record with ``expires_at <= now``. Returns the count deleted."""
        with self._transaction("sweep") as conn:
            cursor = conn.execute(
                "DELETE FROM occupation_cache WHERE expires_at <= ?",
                (self.clock(),),
            )
            return cursor.rowcount

    def delete(self, code: str) -> None:
        """Delete a cached occupation."""
        with self._transaction("delete") as conn:
            conn.execute(
                "DELETE FROM occupation_cache WHERE occupation_code = ?", (code.strip(),)
            )

    def clear(self) -> int:
        """Clear all cached entries. Returns count of deleted rows."""
        with self._transaction("clear") as conn:
            return conn.execute("DELETE FROM occupation_cache").rowcount

    def stats(self) -> dict:
        """Return cache statistics."""
        with self._transaction("stats") as conn:
            total = conn.execute("SELECT COUNT(*) FROM occupation_cache").fetchone()[0]
            expired = conn.execute(
                "SELECT COUNT(*) FROM occupation_cache WHERE expires_at <= ?",
                (self.clock(),),
            ).fetchone()[0]
        return {"total": total, "expired": expired, "active": total - expired}
