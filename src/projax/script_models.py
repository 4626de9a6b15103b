from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProjectRef:
    """Registered project directory a script runs in."""

    path: str
    name: str


@dataclass(frozen=True)
class ScriptDescriptor:
    """A runnable script resolved by project discovery."""

    name: str
    command: str
    runner_kind: str
    project_kind: str = "unknown"
