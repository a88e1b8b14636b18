"""Search-result cache and most-recently-used list."""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from models.search import SearchCacheEntry, SearchOptions

from .storage import MRU_STORAGE_KEY, SEARCH_CACHE_STORAGE_KEY, KeyValueStore

logger = logging.getLogger(__name__)

SEARCH_CACHE_TTL_SECONDS = 30.0
MAX_MRU_ITEMS = 100

Clock = Callable[[], float]


def cache_key(options: SearchOptions) -> str:
    """Order-independent fingerprint of the search options."""
    roots = "|".join(sorted(os.path.abspath(root) for root in options.roots))
    extensions = "|".join(sorted(ext.lower() for ext in options.allowed_extensions))
    excludes = "|".join(sorted(item.lower() for item in options.search_excludes))
    return f"{roots}::{extensions}::{excludes}::{options.search_max_depth}"


class SearchCache:
    """Two-level cache: an in-process dict backed by the durable store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Clock = time.time,
        ttl: float = SEARCH_CACHE_TTL_SECONDS,
    ) -> None:
        self.store = store
        self.clock = clock
        self.ttl = ttl
        self._memory: Dict[str, SearchCacheEntry] = {}

    def _expired(self, entry: SearchCacheEntry) -> bool:
        return self.clock() - entry.created_at > self.ttl

    async def _read_persistent(self) -> Dict[str, SearchCacheEntry]:
        raw = await self.store.get(SEARCH_CACHE_STORAGE_KEY)
        if not isinstance(raw, dict):
            return {}
        entries: Dict[str, SearchCacheEntry] = {}
        for key, value in raw.items():
            try:
                entry = SearchCacheEntry.model_validate(value)
            except ValidationError:
                continue
            if not self._expired(entry):
                entries[key] = entry
        return entries

    async def _write_persistent(self, entries: Dict[str, SearchCacheEntry]) -> None:
        if not entries:
            await self.store.remove(SEARCH_CACHE_STORAGE_KEY)
            return
        await self.store.set(
            SEARCH_CACHE_STORAGE_KEY,
            {key: entry.model_dump() for key, entry in entries.items()},
        )

    async def get(self, key: str) -> Optional[List[str]]:
        entry = self._memory.get(key)
        if entry is not None:
            if not self._expired(entry):
                return list(entry.files)
            del self._memory[key]

        persisted = (await self._read_persistent()).get(key)
        if persisted is None:
            return None
        self._memory[key] = persisted
        return list(persisted.files)

    async def set(self, key: str, files: Sequence[str]) -> None:
        entry = SearchCacheEntry(created_at=self.clock(), files=list(files))
        self._memory[key] = entry
        entries = await self._read_persistent()
        entries[key] = entry
        await self._write_persistent(entries)

    async def invalidate(self) -> None:
        self._memory.clear()
        await self.store.remove(SEARCH_CACHE_STORAGE_KEY)


class MruList:
    def __init__(self, store: KeyValueStore, *, limit: int = MAX_MRU_ITEMS) -> None:
        self.store = store
        self.limit = max(limit, 1)

    async def files(self) -> List[str]:
        raw = await self.store.get(MRU_STORAGE_KEY)
        if not isinstance(raw, list):
            return []
        return [item for item in raw if isinstance(item, str)]

    async def touch(self, path: str) -> List[str]:
        existing = await self.files()
        updated = [path, *(item for item in existing if item != path)][: self.limit]
        await self.store.set(MRU_STORAGE_KEY, updated)
        return updated


def sort_by_mru(files: Sequence[str], mru: Sequence[str]) -> List[str]:
    """MRU entries first in MRU order, then the rest in lexical order."""
    ranks: Dict[str, int] = {}
    for index, path in enumerate(mru):
        ranks.setdefault(path, index)
    unranked = len(ranks)
    return sorted(files, key=lambda path: (ranks.get(path, unranked), path))


__all__ = [
    "MAX_MRU_ITEMS",
    "MruList",
    "SEARCH_CACHE_TTL_SECONDS",
    "SearchCache",
    "cache_key",
    "sort_by_mru",
]
