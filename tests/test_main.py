from __future__ import annotations

import io
import json

import pytest

import main


@pytest.fixture
def env(tmp_path, monkeypatch):
    notes = tmp_path / "notes"
    notes.mkdir()
    monkeypatch.setenv("APPEND_ROOTS", str(notes))
    monkeypatch.setenv("APPEND_SUPPORT_DIR", str(tmp_path / "support"))
    monkeypatch.setenv("APPEND_EXTENSIONS", "md")
    monkeypatch.setenv("APPEND_INDEX", "none")
    return notes


def test_append_then_undo(env, capsys):
    target = env / "inbox.md"
    assert main.main(["append", str(target), "first entry"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is True
    assert payload["file_path"] == str(target)
    assert target.read_text(encoding="utf-8") == "first entry\n"

    assert main.main(["undo"]) == 0
    assert json.loads(capsys.readouterr().out)["restored"] == "deleted"
    assert not target.exists()


def test_text_from_stdin(env, capsys, monkeypatch):
    target = env / "inbox.md"
    monkeypatch.setattr("sys.stdin", io.StringIO("piped\ntext\n"))
    assert main.main(["append", str(target), "--style", "quote"]) == 0
    capsys.readouterr()
    assert target.read_text(encoding="utf-8") == "> piped\n> text\n"


def test_failure_sets_exit_code(env, capsys):
    assert main.main(["append", str(env / "a.pdf"), "x"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "ok": False,
        "kind": "policy",
        "message": payload["message"],
    }
    assert "a.pdf" in payload["message"]


def test_quick_append_without_history(env, capsys):
    assert main.main(["quick-append", "x"]) == 1
    assert json.loads(capsys.readouterr().out)["kind"] == "not_found"


def test_discover_and_last(env, capsys):
    note = env / "todo.md"
    note.write_text("x", encoding="utf-8")
    assert main.main(["discover"]) == 0
    assert json.loads(capsys.readouterr().out)["files"] == [str(note)]

    assert main.main(["last"]) == 0
    assert json.loads(capsys.readouterr().out)["file_path"] is None


def test_commands_lists_registry(env, capsys):
    assert main.main(["commands"]) == 0
    names = [entry["name"] for entry in json.loads(capsys.readouterr().out)]
    assert "file.append" in names


def test_unknown_index_setting_does_not_crash(env, capsys, monkeypatch):
    monkeypatch.setenv("APPEND_INDEX", "spotlight-please")
    assert main.main(["last"]) == 0
    assert json.loads(capsys.readouterr().out)["ok"] is True
