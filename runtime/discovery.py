"""Cached, multi-strategy discovery of candidate files under configured roots.

A request first consults :class:`SearchCache`. On a miss the content index is
queried for every root concurrently; roots it could not search are walked
manually instead. Merged results are de-duplicated, checked against the live
filesystem, cached and ranked by recency of use.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Awaitable, List, Optional, Sequence, Set

from models.results import Discovered
from models.search import RootSearchSummary, SearchOptions
from providers.base import ContentIndex

from .cache import MruList, SearchCache, cache_key, sort_by_mru
from .concurrency import filter_by_async_predicate, search_roots_in_parallel
from .search_filters import PathExcluder, matches_extension, relative_depth

logger = logging.getLogger(__name__)

LIVENESS_CONCURRENCY = 64


def dedupe_files(files: Sequence[str]) -> List[str]:
    seen: Set[str] = set()
    out: List[str] = []
    for path in files:
        absolute = os.path.abspath(path)
        if absolute in seen:
            continue
        seen.add(absolute)
        out.append(absolute)
    return out


def walk_root(
    root: str,
    allowed_extensions: Sequence[str],
    excluder: PathExcluder,
    max_depth: int,
) -> List[str]:
    """Depth-limited scan of ``root`` that never follows symbolic links.

    Excluded or too-deep directories are pruned without being listed.
    """
    matches: List[str] = []
    stack: List[tuple[str, int]] = [(root, 0)]
    while stack:
        directory, depth = stack.pop()
        try:
            with os.scandir(directory) as entries:
                listed = list(entries)
        except OSError:
            continue
        for entry in listed:
            try:
                if entry.is_symlink():
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError:
                continue
            if is_dir:
                if depth + 1 > max_depth or excluder(entry.path, root):
                    continue
                stack.append((entry.path, depth + 1))
                continue
            if not is_file or excluder(entry.path, root):
                continue
            if matches_extension(entry.path, allowed_extensions):
                matches.append(entry.path)
    return matches


class FileDiscovery:
    def __init__(
        self,
        cache: SearchCache,
        mru: MruList,
        index: Optional[ContentIndex],
        *,
        liveness_concurrency: int = LIVENESS_CONCURRENCY,
    ) -> None:
        self.cache = cache
        self.mru = mru
        self.index = index
        self.liveness_concurrency = liveness_concurrency
        self._background: Set[asyncio.Task[Any]] = set()

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def discover(
        self, options: SearchOptions, *, refresh_in_background: bool = True
    ) -> Discovered:
        cached = await self.cache.get(cache_key(options))
        if cached is not None:
            logger.debug("Search cache hit (%d files)", len(cached))
            if refresh_in_background:
                self._track_task(self._background_refresh(options))
            return Discovered(files=await self._rank(cached), from_cache=True)
        logger.debug("Search cache miss")
        return await self.refresh(options)

    async def cached(self, options: SearchOptions) -> Optional[List[str]]:
        """Cache-only lookup for instant population; never searches."""
        cached = await self.cache.get(cache_key(options))
        if cached is None:
            return None
        return await self._rank(cached)

    async def refresh(self, options: SearchOptions) -> Discovered:
        """Search, verify, cache and rank, ignoring any cached result."""
        roots = [os.path.abspath(root) for root in options.roots]
        excluder = PathExcluder(options.search_excludes)

        if self.index is None:
            summary = RootSearchSummary(files=[], failed_roots=[])
            files = await self._walk_roots(roots, options, excluder)
        else:
            summary = await search_roots_in_parallel(
                roots, lambda root: self._search_index(root, options, excluder)
            )
            files = list(summary.files)
            if summary.failed_roots:
                logger.info("Walking %d root(s) the index could not search", len(summary.failed_roots))
                files += await self._walk_roots(summary.failed_roots, options, excluder)
            elif not files:
                logger.info("Index returned nothing; walking all roots")
                files += await self._walk_roots(roots, options, excluder)

        live = await self._filter_existing(dedupe_files(files))
        await self.cache.set(cache_key(options), live)
        return Discovered(files=await self._rank(live), failed_roots=summary.failed_roots)

    async def wait_for_background(self) -> None:
        tasks = list(self._background)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # strategies
    # ------------------------------------------------------------------
    async def _search_index(
        self, root: str, options: SearchOptions, excluder: PathExcluder
    ) -> List[str]:
        assert self.index is not None
        found = await self.index.search(root, options.allowed_extensions)
        return [
            path
            for path in found
            if matches_extension(path, options.allowed_extensions)
            and relative_depth(root, path) <= options.search_max_depth
            and not excluder(path, root)
        ]

    async def _walk_roots(
        self, roots: Sequence[str], options: SearchOptions, excluder: PathExcluder
    ) -> List[str]:
        walks = await asyncio.gather(
            *(
                asyncio.to_thread(
                    walk_root,
                    root,
                    options.allowed_extensions,
                    excluder,
                    options.search_max_depth,
                )
                for root in roots
            ),
            return_exceptions=True,
        )
        files: List[str] = []
        for root, result in zip(roots, walks):
            if isinstance(result, Exception):
                logger.warning("Fallback walk failed for %s: %s", root, result)
                continue
            if isinstance(result, BaseException):
                raise result
            files.extend(result)
        return files

    async def _filter_existing(self, files: List[str]) -> List[str]:
        async def is_live_file(path: str, _index: int) -> bool:
            return await asyncio.to_thread(os.path.isfile, path)

        return await filter_by_async_predicate(files, is_live_file, self.liveness_concurrency)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    async def _rank(self, files: Sequence[str]) -> List[str]:
        return sort_by_mru(files, await self.mru.files())

    async def _background_refresh(self, options: SearchOptions) -> None:
        try:
            await self.refresh(options)
        except Exception as exc:
            logger.warning("Background search refresh failed: %s", exc)

    def _track_task(self, coro: Awaitable[Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task


__all__ = ["FileDiscovery", "LIVENESS_CONCURRENCY", "dedupe_files", "walk_root"]
