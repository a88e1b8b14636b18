# append-to-file/providers/mdfind.py
# Purpose: Spotlight-backed content index (macOS).
from __future__ import annotations

from typing import List, Sequence

from .base import ContentIndex


def build_spotlight_query(allowed_extensions: Sequence[str]) -> str:
    """Match any allowed extension, case-insensitively; everything if none."""
    if not allowed_extensions:
        return "kMDItemFSName == '*'"
    clauses = [f"kMDItemFSName == '*{ext}'c" for ext in allowed_extensions]
    return "(" + " || ".join(clauses) + ")"


class MdfindIndex(ContentIndex):
    name = "mdfind"

    def __init__(self, *, executable: str = "mdfind", **kwargs):
        super().__init__(**kwargs)
        self.executable = executable

    async def search(self, root: str, allowed_extensions: Sequence[str]) -> List[str]:
        query = build_spotlight_query(allowed_extensions)
        out = await self.run_query(root, [self.executable, "-onlyin", root, query])
        lines = out.decode("utf-8", errors="replace").splitlines()
        return [line.strip() for line in lines if line.strip()]
