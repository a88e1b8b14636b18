"""Single-slot append history with hash-verified undo."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import ValidationError

from models.append import AppendRecord
from models.results import Undone

from .atomic_write import atomic_write_async
from .errors import FileGoneError, MissingBackupError, NoHistoryError, StaleStateError
from .storage import LAST_APPEND_RECORD_KEY, LAST_APPENDED_FILE_KEY, KeyValueStore

logger = logging.getLogger(__name__)

BACKUP_FILE_NAME = "undo-last-append-before.bin"


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _read_bytes(path: Path) -> bytes:
    return path.read_bytes()


def _unlink(path: Path, *, missing_ok: bool) -> None:
    path.unlink(missing_ok=missing_ok)


class AppendHistory:
    """Owns the last-append record and its before-snapshot.

    Only one append is undoable; recording a new one replaces the previous
    record and snapshot.
    """

    def __init__(self, store: KeyValueStore, support_dir: Path) -> None:
        self.store = store
        self.support_dir = Path(support_dir)

    @property
    def backup_path(self) -> Path:
        return self.support_dir / BACKUP_FILE_NAME

    async def record(
        self, file_path: str, before: Optional[bytes], after: bytes
    ) -> AppendRecord:
        await asyncio.to_thread(self.support_dir.mkdir, parents=True, exist_ok=True)
        if before is not None:
            await atomic_write_async(self.backup_path, before)
        else:
            await asyncio.to_thread(_unlink, self.backup_path, missing_ok=True)

        record = AppendRecord(
            file_path=file_path,
            existed_before=before is not None,
            after_hash=hash_bytes(after),
            backup_path=str(self.backup_path) if before is not None else None,
        )
        await self.store.set(LAST_APPEND_RECORD_KEY, record.model_dump())
        await self.store.set(LAST_APPENDED_FILE_KEY, file_path)
        return record

    async def load(self) -> Optional[AppendRecord]:
        raw = await self.store.get(LAST_APPEND_RECORD_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return AppendRecord.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed append record")
            return None

    async def clear(self) -> None:
        await self.store.remove(LAST_APPEND_RECORD_KEY)

    async def last_appended_file(self) -> Optional[str]:
        raw = await self.store.get(LAST_APPENDED_FILE_KEY)
        return raw if isinstance(raw, str) and raw else None

    async def undo(self) -> Undone:
        record = await self.load()
        if record is None:
            raise NoHistoryError()

        target = Path(record.file_path)
        try:
            current = await asyncio.to_thread(_read_bytes, target)
        except FileNotFoundError as exc:
            raise FileGoneError(record.file_path) from exc

        if hash_bytes(current) != record.after_hash:
            raise StaleStateError()

        restored: Literal["restored", "deleted"]
        if not record.existed_before:
            await asyncio.to_thread(_unlink, target, missing_ok=False)
            if record.backup_path:
                await asyncio.to_thread(_unlink, Path(record.backup_path), missing_ok=True)
            restored = "deleted"
        else:
            if not record.backup_path:
                raise MissingBackupError(
                    "Undo data is incomplete. No backup snapshot available."
                )
            backup = Path(record.backup_path)
            try:
                snapshot = await asyncio.to_thread(_read_bytes, backup)
            except OSError as exc:
                raise MissingBackupError(
                    "Undo data is missing. Backup snapshot not found."
                ) from exc
            await atomic_write_async(target, snapshot)
            await asyncio.to_thread(_unlink, backup, missing_ok=True)
            restored = "restored"

        await self.clear()
        logger.info("Undid last append to %s (%s)", record.file_path, restored)
        return Undone(file_path=record.file_path, restored=restored)


__all__ = ["AppendHistory", "BACKUP_FILE_NAME", "hash_bytes"]
