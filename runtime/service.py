"""Service facade consumed by the command layer.

Every public coroutine returns a result model; failures come back as
:class:`models.results.Failure` instead of being raised.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from models.append import AppendOptions, AppendStyle, InsertPosition
from models.encoding import UTF8_PLAIN, DecodedText
from models.results import (
    AppendOutcome,
    Appended,
    DiscoverOutcome,
    Discovered,
    ErrorKind,
    Failure,
    LastAppended,
    UndoOutcome,
)
from models.search import SearchOptions
from providers import get_index

from .atomic_write import atomic_write_async
from .cache import MruList, SearchCache
from .composer import apply_style, compose, to_snippet
from .config import Settings
from .discovery import FileDiscovery
from .encoding import decode, encode
from .errors import AppendToFileError
from .history import AppendHistory
from .policy import ensure_extension_allowed
from .storage import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)


def _read_existing(path: Path) -> Optional[bytes]:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def failure_from(exc: BaseException) -> Failure:
    if isinstance(exc, AppendToFileError):
        return Failure(kind=exc.kind, message=exc.message)
    if isinstance(exc, FileNotFoundError):
        return Failure(kind=ErrorKind.NOT_FOUND, message=str(exc))
    return Failure(kind=ErrorKind.IO, message=str(exc) or type(exc).__name__)


class AppendService:
    def __init__(
        self,
        *,
        store: KeyValueStore,
        history: AppendHistory,
        discovery: FileDiscovery,
        settings: Optional[Settings] = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.history = history
        self.discovery = discovery
        self.mru: MruList = discovery.mru
        self.settings = settings
        self.now = now

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppendService":
        store = JsonFileStore(settings.store_path)
        discovery = FileDiscovery(
            SearchCache(store),
            MruList(store),
            get_index(settings.index, timeout=settings.index_timeout),
        )
        return cls(
            store=store,
            history=AppendHistory(store, settings.support_dir),
            discovery=discovery,
            settings=settings,
        )

    # ------------------------------------------------------------------
    # option builders
    # ------------------------------------------------------------------
    def options_from_settings(
        self,
        style: Union[AppendStyle, str] = AppendStyle.RAW,
        insert_position: Optional[Union[InsertPosition, str]] = None,
    ) -> AppendOptions:
        if self.settings is None:
            raise RuntimeError("AppendService was built without settings")
        return AppendOptions(
            style=AppendStyle(style),
            allowed_extensions=list(self.settings.allowed_extensions),
            separator=self.settings.separator,
            ensure_trailing_newline=self.settings.ensure_trailing_newline,
            timestamp_format=self.settings.timestamp_format,
            insert_position=InsertPosition(insert_position or self.settings.insert_position),
        )

    def search_options_from_settings(self) -> SearchOptions:
        if self.settings is None:
            raise RuntimeError("AppendService was built without settings")
        return SearchOptions(
            roots=list(self.settings.roots),
            allowed_extensions=list(self.settings.allowed_extensions),
            search_excludes=list(self.settings.search_excludes),
            search_max_depth=self.settings.search_max_depth,
        )

    # ------------------------------------------------------------------
    # append / undo
    # ------------------------------------------------------------------
    async def append(self, file_path: str, text: str, options: AppendOptions) -> AppendOutcome:
        try:
            return await self._append(file_path, text, options)
        except (AppendToFileError, OSError) as exc:
            logger.debug("Append to %s failed: %s", file_path, exc)
            return failure_from(exc)

    async def _append(self, file_path: str, text: str, options: AppendOptions) -> Appended:
        ensure_extension_allowed(file_path, options.allowed_extensions)
        entry = apply_style(text, options.style, options.timestamp_format, now=self.now())

        target = Path(os.path.abspath(os.path.expanduser(file_path)))
        before = await asyncio.to_thread(_read_existing, target)
        existing = decode(before) if before is not None else DecodedText(text="", encoding=UTF8_PLAIN)

        merged = compose(
            existing.text,
            entry,
            separator=options.separator,
            ensure_trailing_newline=options.ensure_trailing_newline,
            insert_position=options.insert_position,
        )
        after = encode(merged, existing.encoding)

        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await atomic_write_async(target, after)

        try:
            await self.mru.touch(str(target))
        except (AppendToFileError, OSError) as exc:
            logger.warning("Could not update recent files: %s", exc)

        history_saved = True
        try:
            await self.history.record(str(target), before, after)
        except (AppendToFileError, OSError) as exc:
            history_saved = False
            logger.warning("Append succeeded but undo snapshot was not saved: %s", exc)

        return Appended(
            file_path=str(target),
            encoding=existing.encoding,
            created=before is None,
            recovered_from_corrupt_bom=existing.recovered_from_corrupt_bom,
            history_saved=history_saved,
            snippet=to_snippet(text),
        )

    async def quick_append(self, text: str, options: AppendOptions) -> AppendOutcome:
        """Append to the last appended file, falling back to the most recent MRU entry."""
        try:
            target = await self.history.last_appended_file()
            if target is None:
                recent = await self.mru.files()
                target = recent[0] if recent else None
        except (AppendToFileError, OSError) as exc:
            return failure_from(exc)
        if target is None:
            return Failure(
                kind=ErrorKind.NOT_FOUND,
                message="No appended file yet. Append to a file first.",
            )
        return await self.append(target, text, options)

    async def undo(self) -> UndoOutcome:
        try:
            return await self.history.undo()
        except (AppendToFileError, OSError) as exc:
            return failure_from(exc)

    async def last_appended_file(self) -> Union[LastAppended, Failure]:
        try:
            return LastAppended(file_path=await self.history.last_appended_file())
        except (AppendToFileError, OSError) as exc:
            return failure_from(exc)

    # ------------------------------------------------------------------
    # discovery
    # ------------------------------------------------------------------
    async def discover(
        self, options: SearchOptions, *, refresh_in_background: bool = True
    ) -> DiscoverOutcome:
        try:
            return await self.discovery.discover(
                options, refresh_in_background=refresh_in_background
            )
        except (AppendToFileError, OSError) as exc:
            return failure_from(exc)

    async def cached_discovery(
        self, options: SearchOptions
    ) -> Union[Discovered, Failure, None]:
        try:
            files = await self.discovery.cached(options)
        except (AppendToFileError, OSError) as exc:
            return failure_from(exc)
        if files is None:
            return None
        return Discovered(files=files, from_cache=True)

    async def aclose(self) -> None:
        await self.discovery.wait_for_background()


__all__ = ["AppendService", "failure_from"]
