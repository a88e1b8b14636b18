"""List candidate files under the configured roots."""

from __future__ import annotations

from pydantic import BaseModel, Field

from command_registry import CommandSpec
from models.results import DiscoverOutcome, ErrorKind, Failure
from runtime.service import AppendService


class DiscoverParams(BaseModel):
    cached_only: bool = Field(default=False, description="Answer from the cache without searching")
    background_refresh: bool = Field(
        default=True, description="Refresh the cache in the background after a cache hit"
    )


async def run(service: AppendService, cached_only: bool, background_refresh: bool) -> DiscoverOutcome:
    options = service.search_options_from_settings()
    if cached_only:
        cached = await service.cached_discovery(options)
        if cached is None:
            return Failure(kind=ErrorKind.NOT_FOUND, message="No cached search results yet.")
        return cached
    return await service.discover(options, refresh_in_background=background_refresh)


COMMAND = CommandSpec(
    name="file.discover",
    model=DiscoverParams,
    handler=run,
    description="Find files with allowed extensions, most recently used first.",
)
