from __future__ import annotations

from typing import Union

from pydantic import BaseModel

from command_registry import CommandSpec
from models.results import Failure, LastAppended
from runtime.service import AppendService


class LastAppendedParams(BaseModel):
    pass


async def run(service: AppendService) -> Union[LastAppended, Failure]:
    return await service.last_appended_file()


COMMAND = CommandSpec(
    name="append.last",
    model=LastAppendedParams,
    handler=run,
    description="Report the file that received the most recent append.",
)
