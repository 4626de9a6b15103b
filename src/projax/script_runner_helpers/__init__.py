"""Helper modules for the script execution engine."""

from .background import create_log_file, log_file_path, spawn_detached
from .exit_watcher import append_exit_trailer, exit_trailer, watch_exit
from .follow_ups import FollowUpTasks
from .foreground import ByteSink, StreamResult, run_streaming, terminal_sink
from .preflight import PortInUseProbe, find_occupied_port
from .retry_budget import RetryBudget

__all__ = [
    "ByteSink",
    "FollowUpTasks",
    "PortInUseProbe",
    "RetryBudget",
    "StreamResult",
    "append_exit_trailer",
    "create_log_file",
    "exit_trailer",
    "find_occupied_port",
    "log_file_path",
    "run_streaming",
    "spawn_detached",
    "terminal_sink",
    "watch_exit",
]
