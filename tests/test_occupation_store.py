"""Tests for the occupation cache store."""

import sqlite3

import pytest

from skill_roadmap.cache.occupation_store import OccupationCacheStore
from skill_roadmap.errors import CacheStoreError
from skill_roadmap.models.occupation import OccupationRecord, Skill

DAY = 86400


@pytest.fixture
def store(tmp_path, clock):
    return OccupationCacheStore(db_path=tmp_path / "cache.db", ttl_days=30, clock=clock)


def _record(code: str, title: str) -> OccupationRecord:
    return OccupationRecord(
        code=code,
        title=title,
        skills=[Skill(name="Programming", code="2.B.5.a", importance=90, level=80)],
    )


class TestOccupationCacheStore:
    def test_put_and_get(self, store, software_developer):
        store.put(software_developer)
        result = store.get("15-1252.00")
        assert result is not None
        assert result.title == "Software Developers"
        assert result.skills == software_developer.skills

    def test_get_nonexistent(self, store):
        assert store.get("99-9999.00") is None

    def test_put_sets_timestamps(self, store, clock, software_developer):
        stored = store.put(software_developer)
        assert stored.created_at == clock.now
        assert stored.expires_at == clock.now + 30 * DAY

    def test_strip_whitespace(self, store, software_developer):
        store.put(software_developer)
        assert store.get("  15-1252.00  ") is not None

    def test_ttl_expiration(self, store, clock, software_developer):
        store.put(software_developer)
        clock.advance(30 * DAY - 1)
        assert store.get("15-1252.00") is not None
        clock.advance(1)
        assert store.get("15-1252.00") is None

    def test_zero_ttl_expires_immediately(self, tmp_path, clock, software_developer):
        store = OccupationCacheStore(db_path=tmp_path / "ttl.db", ttl_days=0, clock=clock)
        store.put(software_developer)
        assert store.get("15-1252.00") is None

    def test_put_is_idempotent(self, store, software_developer):
        store.put(software_developer)
        store.put(software_developer)
        assert store.stats()["total"] == 1
        assert store.get("15-1252.00").title == "Software Developers"

    def test_upsert_keeps_created_at_and_refreshes_expiry(self, store, clock, software_developer):
        first = store.put(software_developer)
        clock.advance(10 * DAY)
        updated = software_developer.model_copy(update={"title": "Software Developers (rev)"})
        second = store.put(updated)

        assert second.created_at == first.created_at
        assert second.expires_at == clock.now + 30 * DAY
        assert store.get("15-1252.00").title == "Software Developers (rev)"

    def test_search_by_title_substring(self, store):
        store.put(_record("15-1252.00", "Software Developers"))
        store.put(_record("15-1253.00", "Software Quality Assurance Analysts"))
        store.put(_record("29-1141.00", "Registered Nurses"))

        results = store.search_by_title_substring("software")
        assert {r.code for r in results} == {"15-1252.00", "15-1253.00"}

    def test_search_is_case_insensitive(self, store):
        store.put(_record("29-1141.00", "Registered Nurses"))
        assert len(store.search_by_title_substring("NURSE")) == 1

    def test_search_skips_expired(self, store, clock):
        store.put(_record("15-1252.00", "Software Developers"))
        clock.advance(31 * DAY)
        assert store.search_by_title_substring("software") == []

    def test_sweep_expired(self, store, clock):
        store.put(_record("15-1252.00", "Software Developers"))
        clock.advance(20 * DAY)
        store.put(_record("29-1141.00", "Registered Nurses"))
        clock.advance(15 * DAY)

        assert store.sweep_expired() == 1
        assert store.stats() == {"total": 1, "expired": 0, "active": 1}
        assert store.get("29-1141.00") is not None

    def test_sweep_with_nothing_expired(self, store, software_developer):
        store.put(software_developer)
        assert store.sweep_expired() == 0

    def test_delete(self, store, software_developer):
        store.put(software_developer)
        store.delete("15-1252.00")
        assert store.get("15-1252.00") is None

    def test_clear(self, store):
        store.put(_record("15-1252.00", "Software Developers"))
        store.put(_record("29-1141.00", "Registered Nurses"))
        assert store.clear() == 2
        assert store.get("15-1252.00") is None

    def test_stats_counts_expired(self, store, clock):
        store.put(_record("15-1252.00", "Software Developers"))
        clock.advance(31 * DAY)
        store.put(_record("29-1141.00", "Registered Nurses"))
        assert store.stats() == {"total": 2, "expired": 1, "active": 1}

    def test_persists_across_instances(self, tmp_path, clock, software_developer):
        OccupationCacheStore(db_path=tmp_path / "c.db", clock=clock).put(software_developer)
        reopened = OccupationCacheStore(db_path=tmp_path / "c.db", clock=clock)
        assert reopened.get("15-1252.00") is not None

    def test_sqlite_failure_raises_cache_store_error(self, store, monkeypatch):
        def broken_connect(*args, **kwargs):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(sqlite3, "connect", broken_connect)
        with pytest.raises(CacheStoreError, match="get failed"):
            store.get("15-1252.00")
