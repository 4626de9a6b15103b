"""Delayed follow-up tasks attached to one background process."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Dict, Optional, Set

logger = logging.getLogger(__name__)


class FollowUpTasks:
    """
    Track the follow-up tasks of each background PID.

    Tasks for a PID are cancelled as soon as its registry entry is removed in
    this process. Failures are logged and never propagate.
    """

    def __init__(self) -> None:
        self._tasks: Dict[int, Set[asyncio.Task]] = {}

    def start(self, pid: int, coro: Awaitable[None], *, name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.create_task(self._guard(pid, coro), name=name)
        self._tasks.setdefault(pid, set()).add(task)
        task.add_done_callback(lambda done, owner=pid, inner=coro: self._finished(owner, done, inner))
        return task

    def pending(self, pid: Optional[int] = None) -> int:
        if pid is not None:
            return len(self._tasks.get(pid, ()))
        return sum(len(tasks) for tasks in self._tasks.values())

    def cancel(self, pid: int) -> int:
        """Cancel every pending task of ``pid``; returns how many were cancelled."""
        tasks = self._tasks.pop(pid, set())
        cancelled = 0
        for task in tasks:
            if not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.debug("Cancelled %d follow-up task(s) for process %s", cancelled, pid)
        return cancelled

    def cancel_all(self) -> None:
        for pid in list(self._tasks):
            self.cancel(pid)

    async def wait(self) -> None:
        """Wait until every tracked task has finished or been cancelled."""
        while self._tasks:
            tasks = [task for group in self._tasks.values() for task in group]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _guard(self, pid: int, coro: Awaitable[None]) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except (OSError, RuntimeError, ValueError) as exc:
            logger.warning("Follow-up task for process %s failed: %s", pid, exc)

    def _finished(self, pid: int, task: asyncio.Task, coro: Awaitable[None]) -> None:
        # A task cancelled before its first step never started the wrapped coroutine.
        close = getattr(coro, "close", None)
        if close is not None:
            close()
        group = self._tasks.get(pid)
        if group is None:
            return
        group.discard(task)
        if not group:
            self._tasks.pop(pid, None)
