# append-to-file/providers/__init__.py
# Purpose: Factory for content-index backends (Spotlight, locate).
from __future__ import annotations

import shutil
import sys
from typing import Optional

from .base import DEFAULT_TIMEOUT, ContentIndex
from .locate import LocateIndex
from .mdfind import MdfindIndex


def get_index(name: str = "auto", *, timeout: float = DEFAULT_TIMEOUT) -> Optional[ContentIndex]:
    """Return the configured index, or None when every root should be walked."""
    name = (name or "auto").lower()
    if name == "none":
        return None
    if name == "mdfind":
        return MdfindIndex(timeout=timeout)
    if name == "locate":
        return LocateIndex(timeout=timeout)
    if name == "auto":
        if sys.platform == "darwin" and shutil.which("mdfind"):
            return MdfindIndex(timeout=timeout)
        if shutil.which("locate"):
            return LocateIndex(timeout=timeout)
        return None
    raise ValueError(f"Unknown content index: {name}")


__all__ = ["ContentIndex", "LocateIndex", "MdfindIndex", "get_index"]
