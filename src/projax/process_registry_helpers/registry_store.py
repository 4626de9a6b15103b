"""File-backed storage for the process registry.

Several CLI invocations may rewrite the registry at once. Every
read-modify-write holds an exclusive advisory lock on a sidecar
``<registry>.lock`` file, and the new contents are renamed into place so a
reader never sees a half-written file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional, TypeVar

import orjson

from .entry_models import BackgroundProcessEntry

try:
    import fcntl
except ImportError:  # pragma: no cover - fcntl unavailable on non-POSIX platforms  # policy_guard: allow-silent-handler
    fcntl = None

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RegistryFileStore:
    """JSON array of registry entries on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    def read(self) -> List[BackgroundProcessEntry]:
        """Return the stored entries; unreadable or corrupt files read as empty."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:  # policy_guard: allow-silent-handler
            logger.warning("Cannot read process registry %s: %s", self.path, exc)
            return []

        if not raw.strip():
            return []
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:  # policy_guard: allow-silent-handler
            logger.warning("Process registry %s is corrupt; treating it as empty: %s", self.path, exc)
            return []
        if not isinstance(payload, list):
            logger.warning("Process registry %s is not a JSON array; treating it as empty", self.path)
            return []

        entries: list[BackgroundProcessEntry] = []
        for item in payload:
            if not isinstance(item, dict):
                logger.warning("Dropping malformed registry record: %r", item)
                continue
            try:
                entries.append(BackgroundProcessEntry.from_dict(item))
            except ValueError as exc:  # policy_guard: allow-silent-handler
                logger.warning("Dropping malformed registry record: %s", exc)
        return entries

    def write(self, entries: List[BackgroundProcessEntry]) -> None:
        """Atomically replace the registry file with ``entries``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = orjson.dumps([entry.to_dict() for entry in entries], option=orjson.OPT_INDENT_2)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError:
            try:
                os.unlink(tmp_name)
            except OSError:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
                pass
            raise

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the exclusive registry lock for the duration of the block."""
        if fcntl is None:  # pragma: no cover - non-POSIX platforms
            yield
            return

        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o664)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            yield
        finally:
            try:
                fcntl.flock(fd, fcntl.LOCK_UN)
            finally:
                os.close(fd)

    def mutate(self, mutation: Callable[[List[BackgroundProcessEntry]], "tuple[Optional[List[BackgroundProcessEntry]], T]"]) -> T:
        """
        Run a locked read-modify-write.

        ``mutation`` receives the current entries and returns ``(new_entries,
        result)``; ``new_entries=None`` skips the write.
        """
        with self.locked():
            current = self.read()
            updated, result = mutation(current)
            if updated is not None:
                self.write(updated)
            return result
