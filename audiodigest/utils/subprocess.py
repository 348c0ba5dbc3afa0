"""Async subprocess helpers.

Commands are always passed as an argument vector (no shell). The child is
killed and reaped when the awaiting task is cancelled or the timeout expires,
so an abandoned run does not leave a transcoder running in the background.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    args: tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def stderr_text(self, limit: int = 4000) -> str:
        text = self.stderr.decode("utf-8", errors="replace").strip()
        if len(text) > limit:
            text = "…" + text[-limit:]
        return text


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        return
    await process.wait()


async def run_subprocess(
    args: Sequence[str],
    *,
    timeout_s: float | None = None,
) -> RunResult:
    """Run `args` and wait for it; never raises on a non-zero exit.

    Raises FileNotFoundError when the executable does not exist and
    TimeoutError when `timeout_s` elapses.
    """
    argv = tuple(str(a) for a in args)
    process = await asyncio.create_subprocess_exec(
        *argv, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
    )
    logger.debug("spawned pid=%s cmd=%s", process.pid, argv[0])
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_s)
    except asyncio.TimeoutError as exc:
        await _kill(process)
        raise TimeoutError(f"{argv[0]} timed out after {timeout_s}s") from exc
    except asyncio.CancelledError:
        logger.info("cancelled, killing pid=%s (cmd=%s)", process.pid, argv[0])
        await _kill(process)
        raise
    return RunResult(
        args=argv,
        returncode=int(process.returncode or 0),
        stdout=stdout or b"",
        stderr=stderr or b"",
    )
