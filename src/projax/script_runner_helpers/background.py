"""Detached spawn of background scripts with output redirected to a log file."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ..command_builder import SpawnCommand
from ..errors import SpawnError
from ..process_registry_helpers import now_millis

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def log_file_path(logs_dir: Path, script_name: str, started_ms: Optional[int] = None) -> Path:
    stamp = now_millis() if started_ms is None else started_ms
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", script_name) or "script"
    return logs_dir / f"process-{stamp}-{safe_name}.log"


def create_log_file(logs_dir: Path, script_name: str) -> Path:
    """Create an empty log file for a new background process."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    path = log_file_path(logs_dir, script_name)
    path.touch()
    return path


def _detach_kwargs(platform: str) -> Dict[str, Any]:
    if platform == "win32":
        flags = getattr(subprocess, "DETACHED_PROCESS", 0x00000008) | getattr(
            subprocess, "CREATE_NEW_PROCESS_GROUP", 0x00000200
        )
        return {"creationflags": flags}
    return {"start_new_session": True}


def spawn_detached(
    command: SpawnCommand,
    cwd: str,
    log_path: Path,
    *,
    platform: Optional[str] = None,
) -> subprocess.Popen:
    """
    Start ``command`` so it outlives this process.

    stdout and stderr are appended to ``log_path``; stdin is the null device.
    The parent's copy of the log descriptor is closed once the child has it.

    Raises:
        SpawnError: the executable could not be started
    """
    log_fd = os.open(log_path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
    try:
        process = subprocess.Popen(
            command.argv,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=log_fd,
            stderr=subprocess.STDOUT,
            close_fds=True,
            **_detach_kwargs(platform or sys.platform),
        )
    except OSError as exc:
        raise SpawnError(command.display, exc.strerror or str(exc)) from exc
    finally:
        os.close(log_fd)

    if not process.pid:
        raise SpawnError(command.display, "no process id was assigned")
    logger.info("Started background process %s: %s (log: %s)", process.pid, command.display, log_path)
    return process
