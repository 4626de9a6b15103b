"""Run a child in the foreground, teeing its output to the terminal."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from ..command_builder import SpawnCommand
from ..errors import SpawnError

logger = logging.getLogger(__name__)

ByteSink = Callable[[bytes], None]

_READ_CHUNK = 4096


@dataclass(frozen=True)
class StreamResult:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def combined_error_text(self) -> str:
        """stderr followed by stdout, the order port extraction scans them in."""
        return self.stderr + self.stdout


def terminal_sink(stream_name: str) -> ByteSink:
    """Write raw bytes to ``sys.stdout``/``sys.stderr`` as they are at call time."""

    def _write(data: bytes) -> None:
        stream: TextIO = getattr(sys, stream_name)
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            buffer.write(data)
            buffer.flush()
        else:
            stream.write(data.decode("utf-8", errors="replace"))
            stream.flush()

    return _write


async def _pump(reader: asyncio.StreamReader, sink: ByteSink, captured: bytearray) -> None:
    while True:
        chunk = await reader.read(_READ_CHUNK)
        if not chunk:
            return
        captured.extend(chunk)
        sink(chunk)


async def run_streaming(
    command: SpawnCommand,
    cwd: str,
    *,
    stdout_sink: Optional[ByteSink] = None,
    stderr_sink: Optional[ByteSink] = None,
) -> StreamResult:
    """
    Spawn ``command`` with inherited stdin and piped output.

    Output is forwarded live and accumulated so a failed run can be scanned
    for port conflicts.

    Raises:
        SpawnError: the executable could not be started
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *command.argv,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise SpawnError(command.display, exc.strerror or str(exc)) from exc

    logger.debug("Started foreground process %s: %s", process.pid, command.display)
    stdout_buffer = bytearray()
    stderr_buffer = bytearray()
    assert process.stdout is not None and process.stderr is not None
    await asyncio.gather(
        _pump(process.stdout, stdout_sink or terminal_sink("stdout"), stdout_buffer),
        _pump(process.stderr, stderr_sink or terminal_sink("stderr"), stderr_buffer),
    )
    exit_code = await process.wait()
    logger.debug("Foreground process %s exited with %s", process.pid, exit_code)
    return StreamResult(
        exit_code=exit_code,
        stdout=stdout_buffer.decode("utf-8", errors="replace"),
        stderr=stderr_buffer.decode("utf-8", errors="replace"),
    )
