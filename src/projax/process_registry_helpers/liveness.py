"""OS-level liveness checks for tracked PIDs."""

import logging

import psutil

logger = logging.getLogger(__name__)


def is_process_alive(pid: int) -> bool:
    """
    Check if PID is running and not a zombie.

    psutil probes with signal 0 on POSIX and queries the process table on
    Windows.
    """
    try:
        if not psutil.pid_exists(pid):
            return False
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except (
        psutil.NoSuchProcess,
        psutil.ZombieProcess,
    ):
        return False
    except psutil.AccessDenied:
        # Exists but belongs to someone else
        return True
    except (psutil.Error, OSError) as exc:  # policy_guard: allow-silent-handler
        logger.debug("Liveness check failed for %s: %s", pid, exc)
        return False
