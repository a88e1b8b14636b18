"""Extension allowlist for append targets."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .errors import PolicyBlockedError


def is_path_allowed_by_extensions(path: str, allowed_extensions: Iterable[str]) -> bool:
    suffix = Path(path).suffix.lower()
    return suffix in {ext.lower() for ext in allowed_extensions}


def ensure_extension_allowed(path: str, allowed_extensions: Iterable[str]) -> None:
    allowed = list(allowed_extensions)
    if not is_path_allowed_by_extensions(path, allowed):
        raise PolicyBlockedError(path, allowed)


__all__ = ["ensure_extension_allowed", "is_path_allowed_by_extensions"]
