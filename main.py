from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional, Sequence

try:
    from dotenv import load_dotenv  # type: ignore

    load_dotenv()
except ImportError:
    pass

from command_registry import CommandError, build_registry
from runtime.config import Settings, load_settings
from runtime.service import AppendService

logger = logging.getLogger("append_to_file")


def _read_text(value: Optional[str]) -> str:
    if value is None or value == "-":
        return sys.stdin.read()
    return value


def _command_for(args: argparse.Namespace) -> tuple[str, Dict[str, Any]]:
    if args.action == "append":
        params: Dict[str, Any] = {"path": args.path, "text": _read_text(args.text), "style": args.style}
        if args.position:
            params["insert_position"] = args.position
        return "file.append", params
    if args.action == "quick-append":
        params = {"text": _read_text(args.text), "style": args.style}
        if args.position:
            params["insert_position"] = args.position
        return "file.quick_append", params
    if args.action == "discover":
        return "file.discover", {"cached_only": args.cached_only, "background_refresh": False}
    if args.action == "undo":
        return "append.undo", {}
    return "append.last", {}


async def run(args: argparse.Namespace, settings: Settings) -> int:
    service = AppendService.from_settings(settings)
    registry = build_registry(service)
    try:
        if args.action == "commands":
            print(json.dumps(registry.describe(), indent=2))
            return 0
        name, params = _command_for(args)
        logger.debug("Dispatching %s", name)
        try:
            result = await registry.call(name, **params)
        except CommandError as exc:
            print(json.dumps({"ok": False, "kind": "validation", "message": str(exc)}))
            return 2
        print(result.model_dump_json(indent=2))
        return 0 if result.ok else 1
    finally:
        await service.aclose()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Append text to files safely, with undo.")
    sub = p.add_subparsers(dest="action", required=True)

    styles = ["raw", "bullet", "quote", "timestamp"]
    positions = ["end", "beginning"]

    ap = sub.add_parser("append", help="Append text to a file.")
    ap.add_argument("path", help="Target file.")
    ap.add_argument("text", nargs="?", help="Text to append; read from stdin when omitted or '-'.")
    ap.add_argument("--style", choices=styles, default="raw")
    ap.add_argument("--position", choices=positions, help="Override the configured insert position.")

    qp = sub.add_parser("quick-append", help="Append to the last appended file.")
    qp.add_argument("text", nargs="?", help="Text to append; read from stdin when omitted or '-'.")
    qp.add_argument("--style", choices=styles, default="raw")
    qp.add_argument("--position", choices=positions, help="Override the configured insert position.")

    dp = sub.add_parser("discover", help="List candidate files under the configured roots.")
    dp.add_argument("--cached-only", action="store_true", help="Only answer from the search cache.")

    sub.add_parser("undo", help="Undo the most recent append.")
    sub.add_parser("last", help="Show the last appended file.")
    sub.add_parser("commands", help="Describe the registered commands.")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
