"""Cache-first occupation lookup with API write-through and static fallback."""

from __future__ import annotations

import logging
from collections import Counter

from skill_roadmap.cache.fallback_data import build_fallback_record
from skill_roadmap.cache.occupation_store import OccupationCacheStore
from skill_roadmap.clients.onet_client import RateLimitedOccupationClient
from skill_roadmap.errors import CacheStoreError, OccupationDataError
from skill_roadmap.models.occupation import (
    OccupationRecord,
    OccupationResolution,
    OccupationSummary,
)
from skill_roadmap.utils.batching import batch_process
from skill_roadmap.utils.result import Err, Ok, Result, first_success

logger = logging.getLogger(__name__)

DEFAULT_SKILL_COMPLEXITY = 50.0


class OccupationCacheManager:
    """Resolves occupation records: cache, then the O*NET client, then fallback.

    Never raises for data-availability problems. Callers learn how a record
    was obtained from ``OccupationResolution.source``.
    """

    def __init__(
        self,
        store: OccupationCacheStore,
        client: RateLimitedOccupationClient,
        *,
        batch_size: int = 5,
        cache_version: str = "29.0",
    ):
        self.store = store
        self.client = client
        self.batch_size = batch_size
        self.cache_version = cache_version
        self.stats: Counter[str] = Counter()

    # --- strategies ---

    async def _from_cache(self, code: str) -> Result[OccupationRecord]:
        try:
            record = self.store.get(code)
        except CacheStoreError as exc:
            logger.warning("Occupation cache read failed for %s: %s", code, exc)
            return Err(exc)
        if record is None:
            return Err(LookupError(f"{code} not cached"))
        return Ok(record)

    async def _from_api(self, code: str) -> Result[OccupationRecord]:
        try:
            record = await self.client.fetch_occupation_by_code(code)
        except OccupationDataError as exc:
            logger.warning("O*NET fetch failed for %s: %s", code, exc)
            return Err(exc)
        try:
            record = self.store.put(record)
        except CacheStoreError as exc:
            logger.warning("Failed to cache occupation %s: %s", code, exc)
        return Ok(record)

    async def _from_fallback(self, code: str) -> Result[OccupationRecord]:
        return Ok(build_fallback_record(code, self.cache_version))

    # --- public API ---

    async def resolve(self, code: str) -> OccupationResolution:
        """Resolve one code. Only the cache stage runs on a hit."""
        code = code.strip()
        outcome = await first_success([
            ("cache", lambda: self._from_cache(code)),
            ("api", lambda: self._from_api(code)),
            ("fallback", lambda: self._from_fallback(code)),
        ])
        self._count(outcome.stage)
        if outcome.stage == "fallback":
            logger.warning("Serving fallback occupation data for %s", code)
        errors = [
            f"{stage}: {err}" for stage, err in outcome.errors if not isinstance(err, LookupError)
        ]
        return OccupationResolution(record=outcome.value, source=outcome.stage, errors=errors)

    async def get_occupation(self, code: str) -> OccupationRecord:
        return (await self.resolve(code)).record

    async def batch_resolve(self, codes: list[str]) -> list[OccupationResolution]:
        """Resolve many codes; output order matches input order.

        Cache hits are served first; distinct misses are fetched in
        sequential batches of ``batch_size``, concurrent within a batch.
        """
        resolved: dict[str, OccupationResolution] = {}
        misses: list[str] = []
        for raw_code in codes:
            code = raw_code.strip()
            if code in resolved or code in misses:
                continue
            cached = await self._from_cache(code)
            if isinstance(cached, Ok):
                self._count("cache")
                resolved[code] = OccupationResolution(record=cached.value, source="cache")
            else:
                misses.append(code)

        if misses:
            logger.info("Fetching %d uncached occupations", len(misses))
            fetched = await batch_process(misses, self._resolve_miss, self.batch_size)
            resolved.update(zip(misses, fetched))

        return [resolved[code.strip()] for code in codes]

    async def _resolve_miss(self, code: str) -> OccupationResolution:
        outcome = await first_success([
            ("api", lambda: self._from_api(code)),
            ("fallback", lambda: self._from_fallback(code)),
        ])
        self._count(outcome.stage)
        return OccupationResolution(
            record=outcome.value,
            source=outcome.stage,
            errors=[f"{stage}: {err}" for stage, err in outcome.errors],
        )

    async def search_occupations(self, query: str) -> list[OccupationSummary]:
        """Title search: cached records first, then the O*NET search endpoint.

        Search hits are not written to the cache. An API failure yields [].
        """
        try:
            cached = self.store.search_by_title_substring(query)
        except CacheStoreError as exc:
            logger.warning("Occupation cache search failed: %s", exc)
            cached = []
        if cached:
            return [OccupationSummary(code=r.code, title=r.title) for r in cached]
        try:
            return await self.client.search_occupations(query)
        except OccupationDataError as exc:
            logger.warning("O*NET search failed for %r: %s", query, exc)
            return []

    async def get_skill_complexities(self, skill_codes: list[str]) -> list[float]:
        """0-100 complexity per skill code; failures fall back to 50."""

        async def one(skill_code: str) -> float:
            try:
                return await self.client.fetch_skill_complexity(skill_code)
            except OccupationDataError as exc:
                logger.debug("Skill complexity unavailable for %s: %s", skill_code, exc)
                return DEFAULT_SKILL_COMPLEXITY

        return await batch_process(skill_codes, one, self.batch_size)

    def sweep_expired(self) -> int:
        deleted = self.store.sweep_expired()
        if deleted:
            logger.info("Swept %d expired occupation records", deleted)
        return deleted

    def _count(self, source: str) -> None:
        self.stats["hits" if source == "cache" else "misses"] += 1
        if source == "fallback":
            self.stats["fallbacks"] += 1
