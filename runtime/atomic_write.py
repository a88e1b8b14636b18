"""Crash-safe single-file replacement."""

from __future__ import annotations

import asyncio
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def make_temp_path(path: Path) -> Path:
    nonce = f"{os.getpid()}-{int(time.time() * 1000)}-{secrets.token_hex(6)}"
    return path.with_name(f".{path.name}.tmp-{nonce}")


def atomic_write(path: PathLike, data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers see old or new bytes, never a mix.

    The temporary file lives next to the target so the final ``os.replace`` is a
    rename within one filesystem.
    """
    target = Path(path)
    temp = make_temp_path(target)
    created = False
    try:
        with open(temp, "xb") as handle:
            created = True
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp, target)
    except BaseException:
        if created:
            try:
                temp.unlink()
            except OSError as exc:
                logger.debug("Could not remove temp file %s: %s", temp, exc)
        raise


async def atomic_write_async(path: PathLike, data: bytes) -> None:
    await asyncio.to_thread(atomic_write, path, data)


__all__ = ["atomic_write", "atomic_write_async", "make_temp_path"]
