from __future__ import annotations

from pydantic import BaseModel

from command_registry import CommandSpec
from models.results import UndoOutcome
from runtime.service import AppendService


class UndoParams(BaseModel):
    pass


async def run(service: AppendService) -> UndoOutcome:
    """Revert the most recent append if the file is unchanged since."""
    return await service.undo()


COMMAND = CommandSpec(name="append.undo", model=UndoParams, handler=run)
