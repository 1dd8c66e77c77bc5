"""Bounded-concurrency batch helper."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def batch_process(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int = 5,
) -> list[R]:
    """Run ``worker`` over ``items`` in sequential batches.

    Items inside a batch run concurrently; the next batch starts only after
    the previous one finishes. Results keep input order. Exceptions from
    ``worker`` propagate, so workers that must not fail should catch their
    own errors.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    results: list[R] = []
    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))
    return results
