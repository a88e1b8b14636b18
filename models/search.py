from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class SearchOptions(BaseModel):
    """Inputs to a discovery request."""

    roots: List[str] = Field(default_factory=list)
    allowed_extensions: List[str] = Field(default_factory=list)
    search_excludes: List[str] = Field(default_factory=list)
    search_max_depth: int = Field(8, ge=0)


class SearchCacheEntry(BaseModel):
    created_at: float
    files: List[str] = Field(default_factory=list)


class RootSearchSummary(BaseModel):
    files: List[str] = Field(default_factory=list)
    failed_roots: List[str] = Field(default_factory=list)
