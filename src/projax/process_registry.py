"""
Process Registry

Durable ledger of the background processes the runner launched, shared by
every CLI invocation through one JSON file. Entries are removed, never marked
dead: by the launching invocation's exit watcher when it is still alive, or
by the liveness sweep any later invocation performs.

Usage:
    from projax.process_registry import ProcessRegistry

    registry = ProcessRegistry(settings.registry_path)
    live = await registry.list_live()
    stopped = await registry.stop_project("/path/to/project")
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from .port_probe_helpers import PortOwner, force_kill
from .process_registry_helpers import BackgroundProcessEntry, RegistryFileStore, is_process_alive
from .url_extractor import merge_urls

logger = logging.getLogger(__name__)

RemovalListener = Callable[[int], None]


class PortOwnerProbe(Protocol):
    async def owner_of(self, port: int) -> Optional[PortOwner]: ...

    async def kill_owners(self, port: int) -> bool: ...


def _same_project(entry: BackgroundProcessEntry, project_path: str) -> bool:
    if entry.project_path == project_path:
        return True
    try:
        return Path(entry.project_path).resolve() == Path(project_path).resolve()
    except OSError:  # policy_guard: allow-silent-handler
        return False


class ProcessRegistry:
    """Async facade over the registry file."""

    def __init__(
        self,
        path: Path,
        *,
        liveness: Callable[[int], bool] = is_process_alive,
        killer: Callable[[int], bool] = force_kill,
    ) -> None:
        self._store = RegistryFileStore(Path(path))
        self._is_alive = liveness
        self._kill = killer
        self._removal_listeners: list[RemovalListener] = []

    @property
    def path(self) -> Path:
        return self._store.path

    def add_removal_listener(self, listener: RemovalListener) -> None:
        """Call ``listener(pid)`` whenever this process removes an entry."""
        self._removal_listeners.append(listener)

    async def list(self) -> List[BackgroundProcessEntry]:
        """Return every stored entry without checking liveness."""
        return await asyncio.to_thread(self._store.read)

    async def list_live(self) -> List[BackgroundProcessEntry]:
        """Drop entries whose process is gone, persist the survivors, return them."""

        def _sweep(entries: List[BackgroundProcessEntry]):
            alive: list[BackgroundProcessEntry] = []
            dead: list[int] = []
            for entry in entries:
                if self._is_alive(entry.pid):
                    alive.append(entry)
                else:
                    dead.append(entry.pid)
            if not dead:
                return None, (alive, dead)
            return alive, (alive, dead)

        alive, dead = await asyncio.to_thread(self._store.mutate, _sweep)
        if dead:
            logger.info("Removed %d dead background process(es) from the registry: %s", len(dead), dead)
            self._notify_removed(dead)
        return alive

    async def get(self, pid: int) -> Optional[BackgroundProcessEntry]:
        for entry in await self.list():
            if entry.pid == pid:
                return entry
        return None

    async def for_project(self, project_path: str) -> List[BackgroundProcessEntry]:
        return [entry for entry in await self.list() if _same_project(entry, project_path)]

    async def add(self, entry: BackgroundProcessEntry) -> None:
        """Persist ``entry``, replacing any stale record that reused its PID."""

        def _add(entries: List[BackgroundProcessEntry]):
            kept = [existing for existing in entries if existing.pid != entry.pid]
            return kept + [entry], None

        await asyncio.to_thread(self._store.mutate, _add)
        logger.debug("Registered background process %s (%s)", entry.pid, entry.script_name)

    async def remove_by_pid(self, pid: int, *, notify: bool = True) -> bool:
        """
        Remove the entry for ``pid``; unknown PIDs are a no-op.

        Removal listeners are not called when ``notify`` is False.

        Returns:
            True if an entry was removed
        """

        def _remove(entries: List[BackgroundProcessEntry]):
            kept = [entry for entry in entries if entry.pid != pid]
            if len(kept) == len(entries):
                return None, False
            return kept, True

        removed = await asyncio.to_thread(self._store.mutate, _remove)
        if removed and notify:
            self._notify_removed([pid])
        return removed

    async def merge_urls(self, pid: int, urls: Sequence[str]) -> bool:
        """Add ``urls`` to the entry's detected URLs; False if the entry is gone."""
        if not urls:
            return False

        def _merge(entries: List[BackgroundProcessEntry]):
            updated: list[BackgroundProcessEntry] = []
            changed = False
            found = False
            for entry in entries:
                if entry.pid == pid:
                    found = True
                    merged = merge_urls(entry.detected_urls, urls)
                    if merged != entry.detected_urls:
                        entry = entry.with_urls(merged)
                        changed = True
                updated.append(entry)
            return (updated if changed else None), found

        return await asyncio.to_thread(self._store.mutate, _merge)

    async def stop(self, pid: int) -> bool:
        """
        Kill a tracked process and drop it from the registry.

        The entry is removed even if the kill fails so stuck entries can
        always be cleared.

        Returns:
            True if the entry was removed, False if ``pid`` is not tracked
        """
        entry = await self.get(pid)
        if entry is None:
            return False

        if await asyncio.to_thread(self._is_alive, pid):
            if not await asyncio.to_thread(self._kill, pid):
                logger.warning("Could not kill process %s (%s); removing it from the registry anyway", pid, entry.script_name)
        return await self.remove_by_pid(pid)

    async def stop_project(self, project_path: str) -> int:
        """Stop every tracked process of a project; returns how many were removed."""
        stopped = 0
        for entry in await self.for_project(project_path):
            if await self.stop(entry.pid):
                stopped += 1
        return stopped

    async def stop_by_port(self, port: int, probe: PortOwnerProbe) -> bool:
        """Stop whatever holds ``port``: the tracked entry, or untracked owners directly."""
        owner = await probe.owner_of(port)
        if owner is None:
            return False
        if await self.get(owner.pid) is not None:
            return await self.stop(owner.pid)
        return await probe.kill_owners(port)

    def _notify_removed(self, pids: Sequence[int]) -> None:
        for pid in pids:
            for listener in list(self._removal_listeners):
                listener(pid)


__all__ = ["BackgroundProcessEntry", "ProcessRegistry", "RemovalListener"]
