"""Command lines and output parsers for lsof/netstat on macOS and Linux."""

from __future__ import annotations

import re
from typing import List

_LOCAL_PORT_SUFFIX = re.compile(r"[.:](\d+)$")


def lsof_listen_argv(port: int) -> list[str]:
    """PIDs with a TCP socket listening on ``port``."""
    return ["lsof", "-nP", "-t", f"-iTCP:{port}", "-sTCP:LISTEN"]


def lsof_bound_argv(port: int) -> list[str]:
    """PIDs listening on ``port`` over TCP, plus any UDP socket bound to it."""
    return ["lsof", "-nP", "-t", f"-i:{port}", "-sTCP:LISTEN"]


def netstat_argv() -> list[str]:
    return ["netstat", "-an"]


def parse_pid_lines(stdout: str) -> List[int]:
    """Parse ``lsof -t`` output (one PID per line) preserving order."""
    pids: list[int] = []
    for line in stdout.splitlines():
        token = line.strip()
        if not token.isdigit():
            continue
        pid = int(token)
        if pid not in pids:
            pids.append(pid)
    return pids


def netstat_shows_listener(stdout: str, port: int) -> bool:
    """
    Return True if ``netstat -an`` shows a LISTEN socket bound to ``port``.

    Linux writes ``0.0.0.0:3000`` / ``:::3000``, macOS writes ``*.3000``.
    """
    for line in stdout.splitlines():
        tokens = line.split()
        if len(tokens) < 6 or "LISTEN" not in (token.upper() for token in tokens):
            continue
        match = _LOCAL_PORT_SUFFIX.search(tokens[3])
        if match and int(match.group(1)) == port:
            return True
    return False
