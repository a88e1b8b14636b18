# append-to-file/command_registry.py
# Purpose: Named, validated entry points onto one AppendService.
from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from models.results import Appended, Discovered, Failure, LastAppended, Undone
from runtime.service import AppendService

logger = logging.getLogger(__name__)

CommandResult = Union[Appended, Discovered, Undone, LastAppended, Failure]
Handler = Callable[..., Awaitable[CommandResult]]


class CommandError(Exception):
    """Unknown command, bad registration, or parameters that fail validation."""


@dataclass(slots=True, frozen=True)
class CommandSpec:
    """One command: a params model and an async handler.

    The handler is awaited as ``handler(service, **params)`` with the
    validated parameters and returns a result model.
    """

    name: str
    model: Type[BaseModel]
    handler: Handler
    description: str = ""

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": (self.description or self.handler.__doc__ or "").strip(),
            "schema": self.model.model_json_schema(),
        }


class CommandRegistry:
    def __init__(self, service: AppendService):
        self.service = service
        self._specs: Dict[str, CommandSpec] = {}

    def register(
        self,
        name: str,
        handler: Handler,
        *,
        model: Type[BaseModel],
        description: str = "",
    ) -> CommandSpec:
        spec = CommandSpec(name=name, model=model, handler=handler, description=description)
        self.register_spec(spec)
        return spec

    def register_spec(self, spec: CommandSpec, *, module: Optional[str] = None) -> None:
        origin = f" (from {module})" if module else ""
        if not spec.name:
            raise CommandError(f"Command name must be non-empty{origin}")
        if spec.name in self._specs:
            raise CommandError(f"Command registered twice: {spec.name}{origin}")
        if not (isinstance(spec.model, type) and issubclass(spec.model, BaseModel)):
            raise CommandError(f"{spec.name}{origin} needs a pydantic params model")
        if not inspect.iscoroutinefunction(spec.handler):
            raise CommandError(f"{spec.name}{origin} handler must be async")
        self._specs[spec.name] = spec

    def _spec(self, name: str) -> CommandSpec:
        try:
            return self._specs[name]
        except KeyError as exc:
            raise CommandError(f"Unknown command: {name}") from exc

    async def call(self, name: str, **params: Any) -> CommandResult:
        spec = self._spec(name)
        try:
            payload = spec.model(**params)
        except ValidationError as exc:
            raise CommandError(f"Invalid parameters for {name}: {exc}") from exc
        logger.debug("Calling %s", name)
        return await spec.handler(self.service, **payload.model_dump())

    def list(self) -> List[str]:
        return sorted(self._specs)

    def describe(self) -> List[Dict[str, Any]]:
        return [self._specs[name].summary() for name in self.list()]


def autodiscover_commands(registry: CommandRegistry, package: str = "commands") -> CommandRegistry:
    """Register ``COMMAND`` from every public module in ``package``."""
    pkg = importlib.import_module(package)
    for modinfo in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        if modinfo.name.rsplit(".", 1)[-1].startswith("_"):
            continue
        module = importlib.import_module(modinfo.name)
        spec = getattr(module, "COMMAND", None)
        if not isinstance(spec, CommandSpec):
            raise CommandError(f"{modinfo.name} does not export a COMMAND spec")
        registry.register_spec(spec, module=modinfo.name)
    return registry


def build_registry(service: AppendService) -> CommandRegistry:
    return autodiscover_commands(CommandRegistry(service))
