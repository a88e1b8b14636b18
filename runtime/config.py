# append-to-file/runtime/config.py
# Purpose: Environment-driven settings, normalized into plain values for the core.
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import List, Literal, Mapping, Optional, get_args

from pydantic import BaseModel, Field

from models.append import DEFAULT_TIMESTAMP_FORMAT, InsertPosition

DEFAULT_EXTENSIONS = [".txt", ".md", ".markdown"]
DEFAULT_MAX_DEPTH = 8
MAX_DEPTH_CAP = 64
DEFAULT_SUPPORT_DIR = "~/.local/share/append-to-file"
STORE_FILE_NAME = "store.json"

_LIST_SPLIT = re.compile(r"[\n,]")

IndexName = Literal["auto", "mdfind", "locate", "none"]
INDEX_NAMES = get_args(IndexName)

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    roots: List[str]
    allowed_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    search_excludes: List[str] = Field(default_factory=list)
    search_max_depth: int = DEFAULT_MAX_DEPTH
    separator: str = "\n"
    ensure_trailing_newline: bool = True
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    insert_position: InsertPosition = InsertPosition.END
    support_dir: Path
    index: IndexName = "auto"
    index_timeout: float = 10.0
    log_level: str = "WARNING"

    @property
    def store_path(self) -> Path:
        return self.support_dir / STORE_FILE_NAME


def parse_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in _LIST_SPLIT.split(raw) if part.strip()]


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def normalize_roots(raw: Optional[str]) -> List[str]:
    parsed = parse_list(raw)
    if not parsed:
        documents = Path.home() / "Documents"
        return [str(documents if documents.exists() else Path.home())]
    return [os.path.abspath(os.path.expanduser(root)) for root in parsed]


def normalize_extensions(raw: Optional[str]) -> List[str]:
    source = parse_list(raw) or DEFAULT_EXTENSIONS
    lowered = [ext.strip().lower() for ext in source if ext.strip()]
    return _unique([ext if ext.startswith(".") else f".{ext}" for ext in lowered])


def normalize_excludes(raw: Optional[str]) -> List[str]:
    return _unique(parse_list(raw))


def decode_escapes(value: str) -> str:
    return value.replace("\\n", "\n").replace("\\t", "\t")


def resolve_separator(rule: Optional[str], custom: Optional[str]) -> str:
    rule = (rule or "single-newline").strip().lower()
    if rule == "blank-line":
        return "\n\n"
    if rule == "custom":
        decoded = decode_escapes((custom or "").strip())
        return decoded or "\n"
    return "\n"


def parse_max_depth(raw: Optional[str]) -> int:
    try:
        value = int((raw or str(DEFAULT_MAX_DEPTH)).strip())
    except ValueError:
        return DEFAULT_MAX_DEPTH
    return min(max(value, 0), MAX_DEPTH_CAP)


def parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def parse_insert_position(raw: Optional[str]) -> InsertPosition:
    if (raw or "").strip().lower() == "beginning":
        return InsertPosition.BEGINNING
    return InsertPosition.END


def parse_timeout(raw: Optional[str], default: float = 10.0) -> float:
    try:
        value = float(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


def parse_index(raw: Optional[str]) -> IndexName:
    value = (raw or "auto").strip().lower()
    if value not in INDEX_NAMES:
        logger.warning("Unknown APPEND_INDEX %r; using auto", raw)
        return "auto"
    return value  # type: ignore[return-value]


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``APPEND_*`` environment variables."""
    env = os.environ if env is None else env
    support_dir = os.path.expanduser(env.get("APPEND_SUPPORT_DIR") or DEFAULT_SUPPORT_DIR)
    return Settings(
        roots=normalize_roots(env.get("APPEND_ROOTS")),
        allowed_extensions=normalize_extensions(env.get("APPEND_EXTENSIONS")),
        search_excludes=normalize_excludes(env.get("APPEND_EXCLUDES")),
        search_max_depth=parse_max_depth(env.get("APPEND_MAX_DEPTH")),
        separator=resolve_separator(
            env.get("APPEND_SEPARATOR_RULE"), env.get("APPEND_CUSTOM_SEPARATOR")
        ),
        ensure_trailing_newline=parse_bool(env.get("APPEND_TRAILING_NEWLINE"), True),
        timestamp_format=(env.get("APPEND_TIMESTAMP_FORMAT") or "").strip()
        or DEFAULT_TIMESTAMP_FORMAT,
        insert_position=parse_insert_position(env.get("APPEND_INSERT_POSITION")),
        support_dir=Path(os.path.abspath(support_dir)),
        index=parse_index(env.get("APPEND_INDEX")),
        index_timeout=parse_timeout(env.get("APPEND_INDEX_TIMEOUT")),
        log_level=(env.get("APPEND_LOG_LEVEL") or "WARNING").strip().upper(),
    )


__all__ = ["Settings", "load_settings"]
