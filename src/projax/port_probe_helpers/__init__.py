"""Helper modules for the port probe."""

from .command_runner import CommandResult, ProbeCommandError, run_command
from .owner_models import PortOwner
from .process_terminator import force_kill, read_process_name

__all__ = [
    "CommandResult",
    "PortOwner",
    "ProbeCommandError",
    "force_kill",
    "read_process_name",
    "run_command",
]
