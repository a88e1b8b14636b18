"""Extension, depth and exclusion filters shared by every discovery strategy."""

from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Sequence


@dataclass(slots=True, frozen=True)
class CompiledExclude:
    """One exclusion rule prepared once per request."""

    matcher: Pattern[str]
    match_relative_path: bool = False
    absolute_prefix: Optional[str] = None


def to_posix(path: str) -> str:
    return path.replace("\\", "/")


def _normalize_for_compare(path: str) -> str:
    return to_posix(path).lower()


def _wildcard_to_regex(pattern: str) -> Pattern[str]:
    source = re.escape(pattern).replace(r"\*", ".*")
    return re.compile(source, re.IGNORECASE)


def _relative_posix(root: str, path: str) -> str:
    return to_posix(os.path.relpath(os.path.abspath(path), os.path.abspath(root)))


def _is_outside(relative: str) -> bool:
    return relative == ".." or relative.startswith("../")


def relative_depth(root: str, path: str) -> float:
    """Number of directories between ``root`` and the file at ``path``.

    A file directly inside ``root`` (or ``root`` itself) has depth 0; paths
    outside ``root`` have infinite depth.
    """
    relative = _relative_posix(root, path)
    if relative in ("", "."):
        return 0
    if _is_outside(relative):
        return math.inf
    segments = [part for part in relative.split("/") if part]
    return max(len(segments) - 1, 0)


def matches_extension(path: str, allowed_extensions: Sequence[str]) -> bool:
    if not allowed_extensions:
        return True
    suffix = os.path.splitext(path)[1].lower()
    return suffix in {ext.lower() for ext in allowed_extensions}


def compile_excludes(patterns: Iterable[str]) -> List[CompiledExclude]:
    compiled: List[CompiledExclude] = []
    for raw in patterns:
        pattern = raw.strip()
        if not pattern:
            continue
        if os.path.isabs(pattern):
            prefix = _normalize_for_compare(os.path.abspath(pattern))
            compiled.append(
                CompiledExclude(matcher=_wildcard_to_regex("*"), absolute_prefix=prefix)
            )
            continue
        normalized = to_posix(re.sub(r"^(\./+)+", "", pattern)).lstrip("/")
        compiled.append(
            CompiledExclude(
                matcher=_wildcard_to_regex(normalized),
                match_relative_path="/" in normalized,
            )
        )
    return compiled


def matches_compiled_excludes(
    path: str, root: str, excludes: Sequence[CompiledExclude]
) -> bool:
    if not excludes:
        return False
    absolute = _normalize_for_compare(os.path.abspath(path))
    relative = _relative_posix(root, path).lower()
    segments = [part for part in relative.split("/") if part and part != "."]

    for exclude in excludes:
        if exclude.absolute_prefix is not None:
            prefix = exclude.absolute_prefix.rstrip("/")
            if absolute == exclude.absolute_prefix or absolute.startswith(prefix + "/"):
                return True
            continue
        if _is_outside(relative):
            continue
        if exclude.match_relative_path:
            if exclude.matcher.fullmatch(relative):
                return True
            continue
        if any(exclude.matcher.fullmatch(segment) for segment in segments):
            return True
    return False


class PathExcluder:
    """Callable ``(path, root) -> bool`` over a pre-compiled rule set."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.rules = compile_excludes(patterns)

    def __call__(self, path: str, root: str) -> bool:
        return matches_compiled_excludes(path, root, self.rules)


def is_path_excluded(path: str, root: str, patterns: Iterable[str]) -> bool:
    return PathExcluder(patterns)(path, root)


__all__ = [
    "CompiledExclude",
    "PathExcluder",
    "compile_excludes",
    "is_path_excluded",
    "matches_compiled_excludes",
    "matches_extension",
    "relative_depth",
    "to_posix",
]
