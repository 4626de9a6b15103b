"""
Port Probe

Answers "is TCP port P bound?", "which process owns it?" and kills the
owners. Ownership needs OS tools (lsof/netstat/tasklist) because no portable
unprivileged syscall reports the owner of a listening socket.

Every probe is fail-open: a missing or broken tool reports the port as free
so a broken probe never blocks a legitimate run.

Usage:
    from projax.port_probe import PortProbe

    probe = PortProbe()
    if await probe.is_port_in_use(3000):
        owner = await probe.owner_of(3000)
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional

from .port_extractor import is_valid_port
from .port_probe_helpers import (
    CommandResult,
    PortOwner,
    ProbeCommandError,
    force_kill,
    read_process_name,
    run_command,
)
from .port_probe_helpers import posix_tools, windows_tools

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0
# lsof exits 1 when nothing matched the selection.
_LSOF_NOTHING_FOUND = 1


def _validate_port(port: int) -> None:
    if isinstance(port, bool) or not isinstance(port, int) or not is_valid_port(port):
        raise ValueError(f"Port must be an integer between 1 and 65535 (got {port!r})")


class PortProbe:
    """Cross-platform port inspection backed by OS tools."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        platform: Optional[str] = None,
        killer: Callable[[int], bool] = force_kill,
    ) -> None:
        self.timeout = timeout
        self.platform = platform or sys.platform
        self._killer = killer

    @property
    def is_windows(self) -> bool:
        return self.platform == "win32"

    async def is_port_in_use(self, port: int) -> bool:
        """Return True if something listens on ``port``; probe failures yield False."""
        _validate_port(port)
        if self.is_windows:
            rows = await self._windows_rows()
            return bool(rows and windows_tools.listener_pids(rows, port))
        return await self._posix_in_use(port)

    async def owner_of(self, port: int) -> Optional[PortOwner]:
        """Return the first process listening on ``port`` or None when unidentifiable."""
        _validate_port(port)
        if self.is_windows:
            rows = await self._windows_rows()
            pids = windows_tools.listener_pids(rows or [], port)
            if not pids:
                return None
            return PortOwner(pid=pids[0], command=await self._windows_process_name(pids[0]))

        pids = await self._lsof_pids(posix_tools.lsof_listen_argv(port))
        if not pids:
            return None
        return PortOwner(pid=pids[0], command=read_process_name(pids[0]))

    async def list_owner_pids(self, port: int) -> List[int]:
        """Return every PID bound to ``port`` across protocols and interfaces."""
        _validate_port(port)
        if self.is_windows:
            rows = await self._windows_rows()
            return windows_tools.bound_pids(rows or [], port)
        return await self._lsof_pids(posix_tools.lsof_bound_argv(port)) or []

    async def kill_owners(self, port: int) -> bool:
        """
        Force-kill every process bound to ``port``.

        Returns:
            True if at least one process was signalled
        """
        pids = await self.list_owner_pids(port)
        if not pids:
            return False

        killed = False
        for pid in pids:
            if self._killer(pid):
                logger.info("Killed process %s holding port %s", pid, port)
                killed = True
        return killed

    async def _run(self, argv: list[str]) -> Optional[CommandResult]:
        try:
            return await run_command(argv, timeout=self.timeout)
        except ProbeCommandError as exc:  # policy_guard: allow-silent-handler
            logger.debug("Port probe command failed: %s", exc)
            return None

    async def _lsof_pids(self, argv: list[str]) -> Optional[List[int]]:
        """PIDs reported by lsof; ``[]`` when lsof found nothing, None when lsof failed."""
        result = await self._run(argv)
        if result is None:
            return None
        if result.ok:
            return posix_tools.parse_pid_lines(result.stdout)
        if result.returncode == _LSOF_NOTHING_FOUND and not result.stdout.strip():
            return []
        logger.debug("lsof exited with %s: %s", result.returncode, result.stderr.strip())
        return None

    async def _posix_in_use(self, port: int) -> bool:
        pids = await self._lsof_pids(posix_tools.lsof_listen_argv(port))
        if pids is not None:
            return bool(pids)

        result = await self._run(posix_tools.netstat_argv())
        if result is None or not result.ok:
            return False
        return posix_tools.netstat_shows_listener(result.stdout, port)

    async def _windows_rows(self) -> Optional[List[windows_tools.NetstatRow]]:
        result = await self._run(windows_tools.netstat_argv())
        if result is None or not result.ok:
            return None
        return windows_tools.parse_netstat_rows(result.stdout)

    async def _windows_process_name(self, pid: int) -> str:
        result = await self._run(windows_tools.tasklist_argv(pid))
        if result is None or not result.ok:
            return PortOwner(pid=pid).command
        return windows_tools.parse_tasklist_name(result.stdout) or PortOwner(pid=pid).command


_default_probe: PortProbe | None = None


def get_default_probe() -> PortProbe:
    """Get or initialize the shared probe."""
    global _default_probe
    if _default_probe is None:
        from .config import get_settings

        _default_probe = PortProbe(timeout=get_settings().probe_timeout_seconds)
    return _default_probe


async def is_port_in_use(port: int) -> bool:
    return await get_default_probe().is_port_in_use(port)


async def owner_of(port: int) -> Optional[PortOwner]:
    return await get_default_probe().owner_of(port)


async def kill_owners(port: int) -> bool:
    return await get_default_probe().kill_owners(port)


__all__ = [
    "PortOwner",
    "PortProbe",
    "get_default_probe",
    "is_port_in_use",
    "kill_owners",
    "owner_of",
]
