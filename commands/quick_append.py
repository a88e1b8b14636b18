from __future__ import annotations

from typing import Optional

from command_registry import CommandSpec
from models.append import AppendStyle, InsertPosition
from models.results import AppendOutcome
from runtime.service import AppendService

from ._options import AppendStyleParams


class QuickAppendParams(AppendStyleParams):
    text: str


async def run(
    service: AppendService,
    text: str,
    style: AppendStyle,
    insert_position: Optional[InsertPosition],
) -> AppendOutcome:
    options = service.options_from_settings(style, insert_position)
    return await service.quick_append(text, options)


COMMAND = CommandSpec(
    name="file.quick_append",
    model=QuickAppendParams,
    handler=run,
    description="Append text to the last appended file, or the most recently used one.",
)
