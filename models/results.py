# append-to-file/models/results.py
# Purpose: Closed set of result variants returned by the service facade.

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from models.encoding import TextEncoding


class ErrorKind(str, Enum):
    """Tags for every failure the core can report."""

    VALIDATION = "validation"
    POLICY = "policy"
    NOT_FOUND = "not_found"
    STALE_STATE = "stale_state"
    IO = "io"


class Failure(BaseModel):
    ok: Literal[False] = False
    kind: ErrorKind
    message: str


class Appended(BaseModel):
    ok: Literal[True] = True
    file_path: str
    encoding: TextEncoding
    created: bool = False
    recovered_from_corrupt_bom: bool = False
    history_saved: bool = True
    snippet: str = ""


class Discovered(BaseModel):
    ok: Literal[True] = True
    files: List[str] = Field(default_factory=list)
    from_cache: bool = False
    failed_roots: List[str] = Field(
        default_factory=list,
        description="Roots the content index could not search (fallback walk used)",
    )


class Undone(BaseModel):
    ok: Literal[True] = True
    file_path: str
    restored: Literal["restored", "deleted"]


class LastAppended(BaseModel):
    ok: Literal[True] = True
    file_path: Optional[str] = None


AppendOutcome = Union[Appended, Failure]
DiscoverOutcome = Union[Discovered, Failure]
UndoOutcome = Union[Undone, Failure]
