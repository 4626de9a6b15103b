"""Forceful termination and name lookup for port owners."""

import logging

import psutil

from .owner_models import UNKNOWN_COMMAND

logger = logging.getLogger(__name__)


def force_kill(pid: int) -> bool:
    """
    Kill ``pid`` with a non-catchable signal (SIGKILL / TerminateProcess).

    Returns:
        True if the signal was delivered
    """
    try:
        psutil.Process(pid).kill()
    except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
        logger.debug("Process %s exited before it could be killed", pid)
        return False
    except psutil.AccessDenied:  # policy_guard: allow-silent-handler
        logger.warning("Permission denied killing process %s", pid)
        return False
    except (psutil.Error, OSError) as exc:  # policy_guard: allow-silent-handler
        logger.warning("Failed to kill process %s: %s", pid, exc)
        return False
    return True


def read_process_name(pid: int) -> str:
    """Return the executable name of ``pid`` or ``unknown``."""
    try:
        name = psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):  # policy_guard: allow-silent-handler
        return UNKNOWN_COMMAND
    except (psutil.Error, OSError) as exc:  # policy_guard: allow-silent-handler
        logger.debug("Unable to read name for process %s: %s", pid, exc)
        return UNKNOWN_COMMAND
    return name or UNKNOWN_COMMAND
