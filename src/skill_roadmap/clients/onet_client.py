"""O*NET Web Services client with a shared rate limiter and async support."""

from __future__ import annotations

import asyncio
import contextvars
import logging
import math
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from skill_roadmap.clients.rate_limiter import RateLimiter
from skill_roadmap.errors import (
    CredentialsMissingError,
    OccupationRequestError,
    OccupationResponseError,
)
from skill_roadmap.models.occupation import (
    Ability,
    KnowledgeArea,
    LaborMarketData,
    OccupationRecord,
    OccupationSummary,
    Skill,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://services.onetcenter.org/ws"
DEFAULT_IMPORTANCE = 3.0
DEFAULT_LEVEL = 3.0
DEFAULT_COMPLEXITY_LEVEL = 3.5


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_importance(value: float) -> int:
    """O*NET importance (1-5) to 0-100."""
    return max(0, min(100, _round_half_up(value / 5 * 100)))


def normalize_level(value: float) -> int:
    """O*NET level (0-7) to 0-100."""
    return max(0, min(100, _round_half_up(value / 7 * 100)))


# --- Raw response schemas ---


class _RawElement(BaseModel):
    model_config = ConfigDict(extra="ignore")

    element_id: str
    element_name: str
    im_value: float | None = None
    value: float | None = None
    lv_value: float | None = None
    scale_value: float | None = None

    @property
    def raw_importance(self) -> float:
        for v in (self.im_value, self.value):
            if v is not None:
                return v
        return DEFAULT_IMPORTANCE

    @property
    def raw_level(self) -> float:
        for v in (self.lv_value, self.scale_value):
            if v is not None:
                return v
        return DEFAULT_LEVEL


class _RawOccupation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    title: str


class _RawSkillList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    skill: list[_RawElement] = []


class _RawKnowledgeList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    knowledge: list[_RawElement] = []


class _RawAbilityList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ability: list[_RawElement] = []


class _RawSearchHit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str
    title: str
    description: str | None = None


class _RawSearch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    occupation: list[_RawSearchHit] = []


class _RawSkillDetail(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: float | None = None
    scale_value: float | None = None


@dataclass
class RequestCounter:
    """Requests one client issued inside a ``track_requests`` block."""

    client: Any
    count: int = 0


# Counters open in the current task context. Child tasks inherit the tuple,
# so requests made under asyncio.gather are still counted.
_active_counters: contextvars.ContextVar[tuple[RequestCounter, ...]] = contextvars.ContextVar(
    "onet_request_counters", default=()
)


class RateLimitedOccupationClient:
    """Async O*NET client. Every request waits on one shared RateLimiter.

    Failures are never retried here: each call raises a typed
    OccupationDataError and the caller decides how to degrade.
    """

    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        min_request_interval: float = 0.2,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache_version: str = "29.0",
        search_limit: int = 20,
    ):
        self.username = username or os.environ.get("ONET_API_USERNAME")
        self.password = password or os.environ.get("ONET_API_PASSWORD")
        self.rate_limiter = rate_limiter or RateLimiter(min_request_interval)
        self.cache_version = cache_version
        self.search_limit = search_limit
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self.request_count: int = 0  # lifetime total; use track_requests() per run

    async def __aenter__(self) -> RateLimitedOccupationClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict:
        """Rate-limited authenticated GET returning the decoded JSON object."""
        if not self.has_credentials:
            raise CredentialsMissingError(
                "O*NET credentials required. Set ONET_API_USERNAME and ONET_API_PASSWORD."
            )
        await self.rate_limiter.wait()
        self.request_count += 1
        for counter in _active_counters.get():
            if counter.client is self:
                counter.count += 1
        logger.debug("O*NET GET %s", path)
        try:
            response = await self.client.get(
                path, params=params, auth=(self.username, self.password)
            )
        except httpx.TimeoutException as exc:
            logger.error("O*NET request timed out: %s", path)
            raise OccupationRequestError(f"O*NET request timed out: {path}") from exc
        except httpx.HTTPError as exc:
            logger.error("O*NET request failed: %s", path, exc_info=True)
            raise OccupationRequestError(f"O*NET request failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            logger.error("O*NET API error: %s %s", response.status_code, path)
            raise OccupationRequestError(
                f"O*NET API error: {response.status_code} for {path}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise OccupationResponseError(f"O*NET returned non-JSON body for {path}") from exc
        if not isinstance(data, dict):
            raise OccupationResponseError(
                f"Expected JSON object from O*NET, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def _validate(schema: type[BaseModel], data: dict, what: str):
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise OccupationResponseError(f"Unexpected O*NET {what} payload: {exc}") from exc

    async def fetch_occupation_by_code(self, code: str) -> OccupationRecord:
        """Fetch occupation detail plus skills, knowledge and abilities.

        The four requests are issued concurrently; each still waits its turn
        on the rate limiter. Any failing request fails the whole fetch so a
        partial record is never produced.
        """
        results = await asyncio.gather(
            self._get(f"/online/occupations/{code}"),
            self._get(f"/online/occupations/{code}/skills"),
            self._get(f"/online/occupations/{code}/knowledge"),
            self._get(f"/online/occupations/{code}/abilities"),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        occupation_data, skills_data, knowledge_data, abilities_data = results

        occupation = self._validate(_RawOccupation, occupation_data, "occupation")
        skills = self._validate(_RawSkillList, skills_data, "skills")
        knowledge = self._validate(_RawKnowledgeList, knowledge_data, "knowledge")
        abilities = self._validate(_RawAbilityList, abilities_data, "abilities")

        return OccupationRecord(
            code=code,
            title=occupation.title,
            skills=[
                Skill(
                    name=el.element_name,
                    code=el.element_id,
                    importance=normalize_importance(el.raw_importance),
                    level=normalize_level(el.raw_level),
                    category="Basic Skills" if el.element_id.startswith("2.A") else "Technical Skills",
                )
                for el in skills.skill
            ],
            knowledge_areas=[
                KnowledgeArea(
                    name=el.element_name,
                    level=normalize_level(el.raw_level),
                    importance=normalize_importance(el.raw_importance),
                )
                for el in knowledge.knowledge
            ],
            abilities=[
                Ability(
                    name=el.element_name,
                    level=normalize_level(el.raw_level),
                    importance=normalize_importance(el.raw_importance),
                )
                for el in abilities.ability
            ],
            # O*NET does not publish outlook data on these endpoints
            labor_market=LaborMarketData(employment_outlook="Average"),
            cache_version=self.cache_version,
        )

    async def search_occupations(self, query: str) -> list[OccupationSummary]:
        """Keyword search. Returns at most ``search_limit`` summaries."""
        logger.info("Searching O*NET: %s", query)
        data = await self._get("/online/search", params={"keyword": query})
        search = self._validate(_RawSearch, data, "search")
        return [
            OccupationSummary(code=hit.code, title=hit.title, description=hit.description or "")
            for hit in search.occupation[: self.search_limit]
        ]

    async def fetch_skill_complexity(self, skill_code: str) -> float:
        """Skill level on the 0-100 scale."""
        data = await self._get(f"/online/skills/{skill_code}")
        detail = self._validate(_RawSkillDetail, data, "skill")
        raw = detail.level if detail.level is not None else detail.scale_value
        return float(normalize_level(raw if raw is not None else DEFAULT_COMPLEXITY_LEVEL))

    @contextmanager
    def track_requests(self) -> Iterator[RequestCounter]:
        """Count the requests this client makes inside the block.

        Counting follows the task context, so concurrent runs sharing one
        client each see only their own requests.
        """
        counter = RequestCounter(client=self)
        token = _active_counters.set(_active_counters.get() + (counter,))
        try:
            yield counter
        finally:
            _active_counters.reset(token)
