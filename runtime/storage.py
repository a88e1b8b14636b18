# append-to-file/runtime/storage.py
# Purpose: Durable key-value port shared by the history and discovery layers.
from __future__ import annotations

import abc
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .atomic_write import atomic_write
from .errors import StorageError

logger = logging.getLogger(__name__)

LAST_APPEND_RECORD_KEY = "append-to-file.last-append-record"
LAST_APPENDED_FILE_KEY = "append-to-file.last-appended-file"
MRU_STORAGE_KEY = "append-to-file.mru"
SEARCH_CACHE_STORAGE_KEY = "append-to-file.search-cache"


class KeyValueStore(abc.ABC):
    @abc.abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the JSON-compatible value stored under ``key`` or None."""
        raise NotImplementedError

    @abc.abstractmethod
    async def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store; values are JSON round-tripped to match the file store."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """All keys live in one JSON document rewritten atomically on each change."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageError(f"Cannot read store {self.path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt store file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(self.path, json.dumps(data, sort_keys=True).encode("utf-8"))
        except OSError as exc:
            raise StorageError(f"Cannot write store {self.path}: {exc}") from exc

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[key] = value
            await asyncio.to_thread(self._dump, data)

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if key not in data:
                return
            del data[key]
            await asyncio.to_thread(self._dump, data)


__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "LAST_APPEND_RECORD_KEY",
    "LAST_APPENDED_FILE_KEY",
    "MRU_STORAGE_KEY",
    "MemoryStore",
    "SEARCH_CACHE_STORAGE_KEY",
]
