from __future__ import annotations

import asyncio

import pytest

from runtime.concurrency import (
    filter_by_async_predicate,
    normalize_concurrency,
    search_roots_in_parallel,
    search_roots_with_partial_fallback,
)


def test_normalize_concurrency():
    assert normalize_concurrency(4) == 4
    assert normalize_concurrency(2.9) == 2
    assert normalize_concurrency(0) == 1
    assert normalize_concurrency(-3) == 1
    assert normalize_concurrency(float("nan")) == 1
    assert normalize_concurrency(float("inf")) == 1


@pytest.mark.asyncio
async def test_filter_preserves_input_order_despite_completion_order():
    items = list(range(10))

    async def is_even(item: int, index: int) -> bool:
        assert items[index] == item
        await asyncio.sleep(0.001 * (10 - item))
        return item % 2 == 0

    assert await filter_by_async_predicate(items, is_even, concurrency=4) == [0, 2, 4, 6, 8]


@pytest.mark.asyncio
async def test_filter_never_exceeds_concurrency():
    active = 0
    peak = 0

    async def slow(item: int, _index: int) -> bool:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.001)
        active -= 1
        return True

    result = await filter_by_async_predicate(list(range(20)), slow, concurrency=3)
    assert result == list(range(20))
    assert 1 <= peak <= 3


@pytest.mark.asyncio
async def test_filter_with_invalid_concurrency_runs_serially():
    seen = []

    async def record(item: str, _index: int) -> bool:
        seen.append(item)
        return item != "b"

    assert await filter_by_async_predicate(["a", "b", "c"], record, concurrency=0) == ["a", "c"]
    assert seen == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_filter_empty_input():
    async def never(_item, _index):
        raise AssertionError("predicate should not run")

    assert await filter_by_async_predicate([], never) == []


@pytest.mark.asyncio
async def test_filter_propagates_predicate_errors():
    async def boom(item: int, _index: int) -> bool:
        raise ValueError(item)

    with pytest.raises(ValueError):
        await filter_by_async_predicate([1, 2], boom)


@pytest.mark.asyncio
async def test_parallel_search_records_failed_roots_in_order():
    async def search(root: str):
        await asyncio.sleep(0.001 if root == "/a" else 0)
        if root == "/b":
            raise OSError("index offline")
        return [f"{root}/note.md"]

    summary = await search_roots_in_parallel(["/a", "/b", "/c"], search)
    assert summary.files == ["/a/note.md", "/c/note.md"]
    assert summary.failed_roots == ["/b"]


@pytest.mark.asyncio
async def test_partial_fallback_only_searches_failed_roots():
    fallback_calls = []

    async def search(root: str):
        if root in ("/b", "/d"):
            raise RuntimeError("nope")
        return [f"{root}/x.txt"]

    async def fallback(roots):
        fallback_calls.append(roots)
        return [f"{root}/walked.txt" for root in roots]

    files = await search_roots_with_partial_fallback(["/a", "/b", "/c", "/d"], search, fallback)
    assert fallback_calls == [["/b", "/d"]]
    assert files == ["/a/x.txt", "/c/x.txt", "/b/walked.txt", "/d/walked.txt"]


@pytest.mark.asyncio
async def test_partial_fallback_skipped_when_all_roots_succeed():
    async def search(root: str):
        return [root + "/x.txt"]

    async def fallback(roots):
        raise AssertionError("fallback should not run")

    assert await search_roots_with_partial_fallback(["/a"], search, fallback) == ["/a/x.txt"]
