"""Append text to a chosen file."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from command_registry import CommandSpec
from models.append import AppendStyle, InsertPosition
from models.results import AppendOutcome
from runtime.service import AppendService

from ._options import AppendStyleParams


class AppendTextParams(AppendStyleParams):
    path: str = Field(min_length=1, description="File to append to; created when missing")
    text: str


async def run(
    service: AppendService,
    path: str,
    text: str,
    style: AppendStyle,
    insert_position: Optional[InsertPosition],
) -> AppendOutcome:
    """Append styled text, preserving the file's encoding."""
    options = service.options_from_settings(style, insert_position)
    return await service.append(path, text, options)


COMMAND = CommandSpec(
    name="file.append",
    model=AppendTextParams,
    handler=run,
    description="Append text to a file atomically and record it for undo.",
)
