from __future__ import annotations

import pytest

from runtime.errors import FileGoneError, MissingBackupError, NoHistoryError, StaleStateError
from runtime.history import AppendHistory, hash_bytes
from runtime.storage import LAST_APPEND_RECORD_KEY


@pytest.mark.asyncio
async def test_undo_without_record_raises(store, support_dir):
    history = AppendHistory(store, support_dir)
    with pytest.raises(NoHistoryError):
        await history.undo()


@pytest.mark.asyncio
async def test_undo_restores_previous_bytes(store, support_dir, tmp_path):
    target = tmp_path / "notes.txt"
    target.write_bytes(b"after")
    history = AppendHistory(store, support_dir)

    record = await history.record(str(target), b"before", b"after")
    assert record.existed_before is True
    assert record.after_hash == hash_bytes(b"after")
    assert history.backup_path.read_bytes() == b"before"

    undone = await history.undo()
    assert undone.restored == "restored"
    assert target.read_bytes() == b"before"
    assert not history.backup_path.exists()
    assert await history.load() is None
    with pytest.raises(NoHistoryError):
        await history.undo()


@pytest.mark.asyncio
async def test_undo_deletes_file_created_by_append(store, support_dir, tmp_path):
    target = tmp_path / "new.md"
    target.write_bytes(b"created\n")
    history = AppendHistory(store, support_dir)
    record = await history.record(str(target), None, b"created\n")
    assert record.backup_path is None

    undone = await history.undo()
    assert undone.restored == "deleted"
    assert not target.exists()


@pytest.mark.asyncio
async def test_undo_refuses_when_file_changed(store, support_dir, tmp_path):
    target = tmp_path / "notes.txt"
    target.write_bytes(b"after")
    history = AppendHistory(store, support_dir)
    await history.record(str(target), b"before", b"after")

    target.write_bytes(b"after, then edited")
    with pytest.raises(StaleStateError):
        await history.undo()
    assert target.read_bytes() == b"after, then edited"
    assert await history.load() is not None


@pytest.mark.asyncio
async def test_undo_reports_missing_target(store, support_dir, tmp_path):
    target = tmp_path / "notes.txt"
    history = AppendHistory(store, support_dir)
    await history.record(str(target), b"before", b"after")
    with pytest.raises(FileGoneError):
        await history.undo()


@pytest.mark.asyncio
async def test_undo_reports_missing_backup(store, support_dir, tmp_path):
    target = tmp_path / "notes.txt"
    target.write_bytes(b"after")
    history = AppendHistory(store, support_dir)
    await history.record(str(target), b"before", b"after")
    history.backup_path.unlink()

    with pytest.raises(MissingBackupError):
        await history.undo()
    assert target.read_bytes() == b"after"


@pytest.mark.asyncio
async def test_new_record_replaces_previous(store, support_dir, tmp_path):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    history = AppendHistory(store, support_dir)
    await history.record(str(first), b"a0", b"a1")
    await history.record(str(second), None, b"b1")

    assert await history.last_appended_file() == str(second)
    record = await history.load()
    assert record is not None and record.file_path == str(second)
    assert not history.backup_path.exists()


@pytest.mark.asyncio
async def test_malformed_record_is_treated_as_absent(store, support_dir):
    await store.set(LAST_APPEND_RECORD_KEY, {"file_path": ""})
    history = AppendHistory(store, support_dir)
    assert await history.load() is None
    with pytest.raises(NoHistoryError):
        await history.undo()
