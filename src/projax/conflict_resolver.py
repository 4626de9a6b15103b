"""
Conflict Resolver

Decides what to do when a port the script needs is already held: identify
the owner, then kill it either unconditionally (``force``) or after asking
the user. Without a confirmer (non-interactive embeddings) an unforced
conflict fails immediately.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol

from .output_utils import ConsoleFunc, make_console
from .port_probe_helpers import PortOwner

logger = logging.getLogger(__name__)

Confirmer = Callable[[str], Awaitable[bool]]


class ConflictProbe(Protocol):
    async def owner_of(self, port: int) -> Optional[PortOwner]: ...

    async def kill_owners(self, port: int) -> bool: ...


async def click_confirm(question: str) -> bool:
    """Ask a yes/no question on the terminal (default: no)."""
    import click

    return await asyncio.to_thread(click.confirm, question, default=False)


class ConflictResolver:
    """Resolve an occupied port by killing its owner when allowed."""

    def __init__(
        self,
        probe: ConflictProbe,
        *,
        confirmer: Optional[Confirmer] = None,
        console: Optional[ConsoleFunc] = None,
    ) -> None:
        self._probe = probe
        self._confirmer = confirmer
        self._console = console or make_console()

    @property
    def interactive(self) -> bool:
        return self._confirmer is not None

    async def resolve(self, port: int, project_label: str, force: bool) -> bool:
        """
        Try to free ``port``.

        Returns:
            True if the owner was killed and the caller may retry
        """
        owner = await self._probe.owner_of(port)
        if owner is None:
            self._console(f"Port {port} appears to be in use, but couldn't identify the process.")
            return False

        self._console(f"\n⚠️  Port {port} is already in use by process {owner.pid} ({owner.command})")
        logger.info("Port %s needed by %s is held by PID %s (%s)", port, project_label, owner.pid, owner.command)

        if not force:
            if self._confirmer is None:
                self._console("Not killing it without --force in non-interactive mode.")
                return False
            accepted = await self._confirmer(f"Kill process {owner.pid} ({owner.command}) and continue?")
            if not accepted:
                self._console("Cancelled.")
                return False
        else:
            self._console(f"Killing process {owner.pid} on port {port}...")

        return await self._kill(port)

    async def _kill(self, port: int) -> bool:
        killed = await self._probe.kill_owners(port)
        if killed:
            self._console("✓ Process killed. Retrying...\n")
        else:
            self._console(f"Failed to kill process on port {port}")
        return killed


__all__ = ["ConflictProbe", "ConflictResolver", "Confirmer", "click_confirm"]
