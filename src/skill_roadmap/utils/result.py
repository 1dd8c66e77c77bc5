"""Explicit success/failure values for fallback chains."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


@dataclass
class ChainOutcome(Generic[T]):
    """Winning stage of a fallback chain plus the failures seen before it."""

    value: T
    stage: str
    errors: list[tuple[str, Exception]]


class FallbackExhaustedError(Exception):
    """Every stage of a fallback chain returned Err."""

    def __init__(self, errors: list[tuple[str, Exception]]):
        stages = ", ".join(f"{name}: {err}" for name, err in errors) or "no stages"
        super().__init__(f"All fallback stages failed ({stages})")
        self.errors = errors


async def first_success(
    stages: Sequence[tuple[str, Callable[[], Awaitable[Result[T]]]]],
) -> ChainOutcome[T]:
    """Run stages in order and return the first Ok.

    Each stage is a ``(name, coroutine_factory)`` pair. Stages after the
    winner are never started.
    """
    errors: list[tuple[str, Exception]] = []
    for name, stage in stages:
        result = await stage()
        if isinstance(result, Ok):
            return ChainOutcome(value=result.value, stage=name, errors=errors)
        logger.debug("Stage %s failed: %s", name, result.error)
        errors.append((name, result.error))
    raise FallbackExhaustedError(errors)
