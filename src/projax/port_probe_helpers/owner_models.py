from __future__ import annotations

from dataclasses import dataclass

UNKNOWN_COMMAND = "unknown"


@dataclass(frozen=True)
class PortOwner:
    """Process holding a port."""

    pid: int
    command: str = UNKNOWN_COMMAND
