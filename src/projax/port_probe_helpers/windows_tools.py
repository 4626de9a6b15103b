"""Command lines and output parsers for netstat/tasklist on Windows."""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from typing import List, Optional

_LOCAL_PORT_SUFFIX = re.compile(r":(\d+)$")


@dataclass(frozen=True)
class NetstatRow:
    protocol: str
    local_port: int
    state: str
    pid: int

    @property
    def is_tcp_listener(self) -> bool:
        return self.protocol == "TCP" and self.state == "LISTENING"


def netstat_argv() -> list[str]:
    return ["netstat", "-ano"]


def tasklist_argv(pid: int) -> list[str]:
    return ["tasklist", "/FI", f"PID eq {pid}", "/FO", "CSV", "/NH"]


def parse_netstat_rows(stdout: str) -> List[NetstatRow]:
    """
    Parse ``netstat -ano`` output.

    TCP rows carry a state column, UDP rows do not::

        TCP    0.0.0.0:3000     0.0.0.0:0     LISTENING    1234
        UDP    0.0.0.0:5353     *:*                        4321
    """
    rows: list[NetstatRow] = []
    for line in stdout.splitlines():
        tokens = line.split()
        if len(tokens) < 4:
            continue
        protocol = tokens[0].upper()
        if protocol not in ("TCP", "UDP"):
            continue
        match = _LOCAL_PORT_SUFFIX.search(tokens[1])
        if not match or not tokens[-1].isdigit():
            continue
        state = tokens[3].upper() if protocol == "TCP" and len(tokens) >= 5 else ""
        rows.append(
            NetstatRow(
                protocol=protocol,
                local_port=int(match.group(1)),
                state=state,
                pid=int(tokens[-1]),
            )
        )
    return rows


def listener_pids(rows: List[NetstatRow], port: int) -> List[int]:
    """PIDs with a TCP listener on ``port``."""
    return _unique_pids(row for row in rows if row.local_port == port and row.is_tcp_listener)


def bound_pids(rows: List[NetstatRow], port: int) -> List[int]:
    """PIDs with a TCP listener or a UDP socket on ``port``."""
    return _unique_pids(row for row in rows if row.local_port == port and (row.is_tcp_listener or row.protocol == "UDP"))


def _unique_pids(rows) -> List[int]:
    pids: list[int] = []
    for row in rows:
        # PID 0 is the System Idle Process placeholder for sockets in teardown.
        if row.pid and row.pid not in pids:
            pids.append(row.pid)
    return pids


def parse_tasklist_name(stdout: str) -> Optional[str]:
    """Return the image name from ``tasklist /FO CSV /NH`` output."""
    for record in csv.reader(io.StringIO(stdout)):
        if len(record) >= 2 and record[0] and not record[0].startswith("INFO:"):
            return record[0]
    return None
