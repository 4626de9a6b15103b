"""Error types raised by the script runner."""

from __future__ import annotations

from typing import Optional


class ProjaxError(RuntimeError):
    """Base class for script runner failures."""


class PortConflictError(ProjaxError):
    """Raised when a port conflict could not be resolved."""

    def __init__(self, port: int, *, reason: str = "Port conflict not resolved") -> None:
        super().__init__(f"{reason} (port {port})")
        self.port = port
        self.reason = reason

    @classmethod
    def reoccupied(cls, port: int, retries: int) -> "PortConflictError":
        """Create error for a port that came back after the retry budget was spent."""
        return cls(port, reason=f"Port was occupied again after {retries} conflict retr{'y' if retries == 1 else 'ies'}")


class ScriptFailedError(ProjaxError):
    """Raised when a foreground script exits with a non-zero status."""

    def __init__(self, exit_code: int, *, port: Optional[int] = None) -> None:
        message = f"Script exited with code {exit_code}"
        if port is not None:
            message += f" (port {port} conflict)"
        super().__init__(message)
        self.exit_code = exit_code
        self.port = port


class SpawnError(ProjaxError):
    """Raised when a script process could not be started."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"Failed to execute {command!r}: {reason}")
        self.command = command
        self.reason = reason


class ScriptNotFoundError(ProjaxError):
    """Raised when a requested script is not defined for the project."""

    def __init__(self, script_name: str) -> None:
        super().__init__(f'Script "{script_name}" not found in project')
        self.script_name = script_name


__all__ = [
    "PortConflictError",
    "ProjaxError",
    "ScriptFailedError",
    "ScriptNotFoundError",
    "SpawnError",
]
