"""Pure text helpers that turn input text into an entry and merge it into a file."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Union

from models.append import DEFAULT_TIMESTAMP_FORMAT, AppendStyle, InsertPosition

from .errors import EmptyInputError

_NEWLINES = re.compile(r"\r\n?")
_TIMESTAMP_TOKENS = ("YYYY", "MM", "DD", "HH", "mm", "ss")
_WHITESPACE = re.compile(r"\s+")


def normalize_newlines(text: str) -> str:
    return _NEWLINES.sub("\n", text)


def format_timestamp(now: datetime, fmt: str) -> str:
    """Substitute ``YYYY MM DD HH mm ss`` tokens; anything else passes through."""
    values = {
        "YYYY": f"{now.year:04d}",
        "MM": f"{now.month:02d}",
        "DD": f"{now.day:02d}",
        "HH": f"{now.hour:02d}",
        "mm": f"{now.minute:02d}",
        "ss": f"{now.second:02d}",
    }
    out = fmt
    for token in _TIMESTAMP_TOKENS:
        out = out.replace(token, values[token])
    return out


def _normalized_entry(text: str) -> str:
    normalized = normalize_newlines(text).rstrip("\n")
    if not normalized.strip():
        raise EmptyInputError()
    return normalized


def apply_style(
    text: str,
    style: Union[AppendStyle, str] = AppendStyle.RAW,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    now: Optional[datetime] = None,
) -> str:
    """Build the entry to insert; raises :class:`EmptyInputError` on blank text."""
    normalized = _normalized_entry(text)
    style = AppendStyle(style)

    if style is AppendStyle.BULLET:
        head, *tail = normalized.split("\n")
        return "- " + head + "".join(f"\n  {line}" for line in tail)
    if style is AppendStyle.QUOTE:
        return "\n".join(
            f"> {line}" if line else ">" for line in normalized.split("\n")
        )
    if style is AppendStyle.TIMESTAMP:
        stamp = format_timestamp(
            now or datetime.now(), timestamp_format or DEFAULT_TIMESTAMP_FORMAT
        )
        return f"[{stamp}] {normalized}"
    return normalized


def compose(
    existing: str,
    entry: str,
    separator: str = "\n",
    ensure_trailing_newline: bool = True,
    insert_position: Union[InsertPosition, str] = InsertPosition.END,
) -> str:
    entry = _normalized_entry(entry)
    existing = normalize_newlines(existing)
    separator = normalize_newlines(separator) if separator else "\n"

    if not existing:
        return entry + "\n" if ensure_trailing_newline else entry

    body = existing.rstrip("\n")
    if InsertPosition(insert_position) is InsertPosition.BEGINNING:
        merged = entry + separator + body.lstrip("\n")
    else:
        merged = body + separator + entry

    if ensure_trailing_newline:
        return merged.rstrip("\n") + "\n"
    return merged


def to_snippet(text: str, limit: int = 120) -> str:
    collapsed = _WHITESPACE.sub(" ", text).strip()
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[:limit] + "..."


__all__ = [
    "apply_style",
    "compose",
    "format_timestamp",
    "normalize_newlines",
    "to_snippet",
]
