# append-to-file/providers/locate.py
# Purpose: locate/plocate-backed content index (Linux and BSD).
from __future__ import annotations

import glob
import os
from typing import List, Sequence

from .base import ContentIndex


def build_locate_patterns(root: str, allowed_extensions: Sequence[str]) -> List[str]:
    base = glob.escape(os.path.abspath(root).rstrip(os.sep)) + os.sep
    if not allowed_extensions:
        return [base + "*"]
    return [f"{base}*{ext}" for ext in allowed_extensions]


class LocateIndex(ContentIndex):
    """Query the locate database; several patterns match any of them."""

    name = "locate"
    # locate exits 1 when nothing matched
    ok_returncodes = (0, 1)

    def __init__(self, *, executable: str = "locate", **kwargs):
        super().__init__(**kwargs)
        self.executable = executable

    async def search(self, root: str, allowed_extensions: Sequence[str]) -> List[str]:
        patterns = build_locate_patterns(root, allowed_extensions)
        out = await self.run_query(root, [self.executable, "-i", "-0", *patterns])
        entries = out.decode("utf-8", errors="replace").split("\0")
        return [entry for entry in entries if entry.strip()]
