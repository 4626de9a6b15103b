"""Run OS inspection tools without blocking the event loop."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)


class ProbeCommandError(RuntimeError):
    """Raised when an inspection tool cannot be run or does not finish in time."""


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(argv: Sequence[str], *, timeout: float) -> CommandResult:
    """
    Execute ``argv`` and capture its output.

    Raises:
        ProbeCommandError: If the executable is missing or the call times out.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as exc:
        raise ProbeCommandError(f"{argv[0]} is not available: {exc}") from exc
    except OSError as exc:
        raise ProbeCommandError(f"Failed to run {argv[0]}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise ProbeCommandError(f"{argv[0]} did not finish within {timeout}s") from exc

    result = CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    logger.debug("%s exited with %s", " ".join(argv), result.returncode)
    return result
