from __future__ import annotations

import abc
import asyncio
import contextlib
from typing import List, Sequence

from runtime.errors import IndexUnavailableError

DEFAULT_TIMEOUT = 10.0
MAX_OUTPUT_BYTES = 10 * 1024 * 1024
_READ_CHUNK = 64 * 1024


class _OutputLimitExceeded(Exception):
    pass


class ContentIndex(abc.ABC):
    """Fast external file index queried once per search root."""

    name: str = "index"
    ok_returncodes: Sequence[int] = (0,)

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT, max_output: int = MAX_OUTPUT_BYTES):
        self.timeout = timeout
        self.max_output = max_output

    @abc.abstractmethod
    async def search(self, root: str, allowed_extensions: Sequence[str]) -> List[str]:
        """Return absolute paths under ``root``; raise IndexUnavailableError on failure."""
        raise NotImplementedError

    async def run_query(self, root: str, argv: Sequence[str]) -> bytes:
        """Run a read-only index command with a timeout and bounded stdout."""
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise IndexUnavailableError(root, f"{argv[0]} not runnable: {exc}") from exc

        try:
            out, err = await asyncio.wait_for(self._collect(proc), self.timeout)
        except asyncio.TimeoutError:
            await self._kill(proc)
            raise IndexUnavailableError(root, f"{argv[0]} timed out after {self.timeout}s")
        except _OutputLimitExceeded:
            await self._kill(proc)
            raise IndexUnavailableError(root, f"{argv[0]} output exceeded {self.max_output} bytes")

        if proc.returncode not in self.ok_returncodes:
            detail = err.decode(errors="ignore").strip() or f"exit status {proc.returncode}"
            raise IndexUnavailableError(root, detail)
        return out

    async def _collect(self, proc: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
        assert proc.stdout is not None and proc.stderr is not None
        stderr_task = asyncio.ensure_future(proc.stderr.read())
        chunks: List[bytes] = []
        size = 0
        try:
            while True:
                chunk = await proc.stdout.read(_READ_CHUNK)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_output:
                    raise _OutputLimitExceeded()
                chunks.append(chunk)
            err = await stderr_task
        finally:
            if not stderr_task.done():
                stderr_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await stderr_task
        await proc.wait()
        return b"".join(chunks), err

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
        with contextlib.suppress(Exception):
            await proc.wait()
