"""Fan-out/fan-in helpers used by discovery.

Results are always collected by input position, never in completion order.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable, List, Sequence, TypeVar

from models.search import RootSearchSummary

logger = logging.getLogger(__name__)

T = TypeVar("T")

RootSearch = Callable[[str], Awaitable[List[str]]]


async def search_roots_in_parallel(
    roots: Sequence[str], search_root: RootSearch
) -> RootSearchSummary:
    """Search every root concurrently; a failing root is recorded, not raised."""
    settled = await asyncio.gather(
        *(search_root(root) for root in roots), return_exceptions=True
    )
    files: List[str] = []
    failed: List[str] = []
    for root, result in zip(roots, settled):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning("Primary search failed for %s: %s", root, result)
            failed.append(root)
            continue
        files.extend(result)
    return RootSearchSummary(files=files, failed_roots=failed)


async def search_roots_with_partial_fallback(
    roots: Sequence[str],
    search_root: RootSearch,
    search_fallback: Callable[[List[str]], Awaitable[List[str]]],
) -> List[str]:
    primary = await search_roots_in_parallel(roots, search_root)
    if not primary.failed_roots:
        return primary.files
    fallback = await search_fallback(list(primary.failed_roots))
    return [*primary.files, *fallback]


def normalize_concurrency(concurrency: float) -> int:
    try:
        value = float(concurrency)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(value) or value < 1:
        return 1
    return int(value)


async def filter_by_async_predicate(
    items: Sequence[T],
    predicate: Callable[[T, int], Awaitable[bool]],
    concurrency: float = 32,
) -> List[T]:
    """Keep items whose predicate is true, running at most ``concurrency`` checks.

    Each worker claims the next unclaimed index and writes its verdict into a
    table sized to the input, so output order matches input order.
    """
    if not items:
        return []
    width = min(normalize_concurrency(concurrency), len(items))
    keep = [False] * len(items)
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while True:
            current = next_index
            next_index += 1
            if current >= len(items):
                return
            keep[current] = bool(await predicate(items[current], current))

    await asyncio.gather(*(worker() for _ in range(width)))
    return [item for item, kept in zip(items, keep) if kept]


__all__ = [
    "filter_by_async_predicate",
    "normalize_concurrency",
    "search_roots_in_parallel",
    "search_roots_with_partial_fallback",
]
