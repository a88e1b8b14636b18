from __future__ import annotations

import os
from pathlib import Path

from models.append import DEFAULT_TIMESTAMP_FORMAT, InsertPosition
from runtime.config import (
    DEFAULT_EXTENSIONS,
    load_settings,
    normalize_extensions,
    parse_list,
    parse_max_depth,
    resolve_separator,
)


def test_parse_list_splits_on_commas_and_newlines():
    assert parse_list(" a, b\n\nc ,") == ["a", "b", "c"]
    assert parse_list(None) == []


def test_extensions_are_dotted_lowercase_and_unique():
    assert normalize_extensions("MD, .txt, md") == [".md", ".txt"]
    assert normalize_extensions("") == DEFAULT_EXTENSIONS


def test_separator_rules():
    assert resolve_separator(None, None) == "\n"
    assert resolve_separator("blank-line", None) == "\n\n"
    assert resolve_separator("custom", "\\n---\\n") == "\n---\n"
    assert resolve_separator("custom", "   ") == "\n"


def test_max_depth_is_clamped():
    assert parse_max_depth(None) == 8
    assert parse_max_depth("3") == 3
    assert parse_max_depth("-1") == 0
    assert parse_max_depth("500") == 64
    assert parse_max_depth("deep") == 8


def test_load_settings_from_mapping(tmp_path):
    env = {
        "APPEND_ROOTS": f"{tmp_path}/a, {tmp_path}/b",
        "APPEND_EXTENSIONS": "md",
        "APPEND_EXCLUDES": "node_modules\narchive/*",
        "APPEND_MAX_DEPTH": "2",
        "APPEND_SEPARATOR_RULE": "blank-line",
        "APPEND_TRAILING_NEWLINE": "false",
        "APPEND_TIMESTAMP_FORMAT": "  ",
        "APPEND_INSERT_POSITION": "beginning",
        "APPEND_SUPPORT_DIR": str(tmp_path / "support"),
        "APPEND_INDEX": "None",
        "APPEND_INDEX_TIMEOUT": "2.5",
        "APPEND_LOG_LEVEL": "debug",
    }
    settings = load_settings(env)
    assert settings.roots == [os.path.join(str(tmp_path), "a"), os.path.join(str(tmp_path), "b")]
    assert settings.allowed_extensions == [".md"]
    assert settings.search_excludes == ["node_modules", "archive/*"]
    assert settings.search_max_depth == 2
    assert settings.separator == "\n\n"
    assert settings.ensure_trailing_newline is False
    assert settings.timestamp_format == DEFAULT_TIMESTAMP_FORMAT
    assert settings.insert_position is InsertPosition.BEGINNING
    assert settings.store_path == Path(tmp_path / "support" / "store.json")
    assert settings.index == "none"
    assert settings.index_timeout == 2.5
    assert settings.log_level == "DEBUG"


def test_defaults_with_empty_environment():
    settings = load_settings({})
    assert settings.roots
    assert settings.allowed_extensions == DEFAULT_EXTENSIONS
    assert settings.search_excludes == []
    assert settings.separator == "\n"
    assert settings.ensure_trailing_newline is True
    assert settings.insert_position is InsertPosition.END
    assert settings.index == "auto"
    assert settings.index_timeout == 10.0


def test_unknown_index_falls_back_to_auto(tmp_path):
    settings = load_settings({"APPEND_ROOTS": str(tmp_path), "APPEND_INDEX": "grep"})
    assert settings.index == "auto"
    assert load_settings({"APPEND_ROOTS": str(tmp_path), "APPEND_INDEX": " Locate "}).index == "locate"
