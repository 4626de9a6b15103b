"""Non-blocking wait for a detached child's exit."""

from __future__ import annotations

import asyncio
import logging
import signal
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def exit_trailer(returncode: int) -> str:
    """Marker appended to a background log once its process has ended."""
    if returncode < 0:
        try:
            signal_name = signal.Signals(-returncode).name
        except ValueError:
            signal_name = str(-returncode)
        return f"\n\n[Process killed by signal {signal_name}]\n"
    return f"\n\n[Process exited with code {returncode}]\n"


def append_exit_trailer(log_path: Path, returncode: int) -> None:
    try:
        with open(log_path, "a", encoding="utf-8") as handle:
            handle.write(exit_trailer(returncode))
    except OSError as exc:
        logger.warning("Could not append exit status to %s: %s", log_path, exc)


async def watch_exit(process: subprocess.Popen, poll_interval: float) -> int:
    """
    Poll ``process`` until it exits and return its return code.

    Polling keeps the wait cancellable, so an invocation that finishes early
    never waits on a long-running child.
    """
    while True:
        returncode = process.poll()
        if returncode is not None:
            return returncode
        await asyncio.sleep(poll_interval)
