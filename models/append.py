# append-to-file/models/append.py
# Purpose: Pydantic schemas for append options and the persisted undo record.

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_TIMESTAMP_FORMAT = "YYYY-MM-DD HH:mm"


class AppendStyle(str, Enum):
    """How raw input text is decorated before insertion."""

    RAW = "raw"
    BULLET = "bullet"
    QUOTE = "quote"
    TIMESTAMP = "timestamp"


class InsertPosition(str, Enum):
    END = "end"
    BEGINNING = "beginning"


class AppendOptions(BaseModel):
    style: AppendStyle = AppendStyle.RAW
    allowed_extensions: List[str] = Field(default_factory=list)
    separator: str = "\n"
    ensure_trailing_newline: bool = True
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    insert_position: InsertPosition = InsertPosition.END

    @field_validator("separator")
    @classmethod
    def _default_separator(cls, v: str) -> str:
        return v if v else "\n"

    @field_validator("timestamp_format")
    @classmethod
    def _default_timestamp_format(cls, v: str) -> str:
        return v.strip() or DEFAULT_TIMESTAMP_FORMAT


class AppendRecord(BaseModel):
    """Singleton record describing the most recent append.

    When ``existed_before`` is true, ``backup_path`` points at a snapshot of the
    bytes the file held before the append.
    """

    file_path: str = Field(min_length=1)
    existed_before: bool
    after_hash: str = Field(min_length=1)
    backup_path: Optional[str] = None
