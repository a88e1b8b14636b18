"""Shared parameter fields for the append commands."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from models.append import AppendStyle, InsertPosition


class AppendStyleParams(BaseModel):
    style: AppendStyle = Field(default=AppendStyle.RAW, description="raw, bullet, quote or timestamp")
    insert_position: Optional[InsertPosition] = Field(
        default=None, description="end or beginning; defaults to the configured position"
    )
