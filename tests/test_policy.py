from __future__ import annotations

import pytest

from models.results import ErrorKind
from runtime.errors import PolicyBlockedError
from runtime.policy import ensure_extension_allowed, is_path_allowed_by_extensions


def test_extension_match_is_case_insensitive():
    assert is_path_allowed_by_extensions("/notes/Todo.MD", [".md"])
    assert is_path_allowed_by_extensions("/notes/todo.txt", [".TXT", ".md"])
    assert not is_path_allowed_by_extensions("/notes/todo.pdf", [".md"])
    assert not is_path_allowed_by_extensions("/notes/README", [".md"])


def test_empty_allowlist_blocks_everything():
    assert not is_path_allowed_by_extensions("/notes/todo.md", [])


def test_blocked_message_names_path_and_allowed_list():
    with pytest.raises(PolicyBlockedError) as info:
        ensure_extension_allowed("/tmp/a.pdf", [".md", ".txt"])
    err = info.value
    assert err.kind is ErrorKind.POLICY
    assert "/tmp/a.pdf" in err.message
    assert ".md, .txt" in err.message
