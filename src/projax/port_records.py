"""
Port records consumed by the runner.

A port record says "this project (or one of its scripts) is known to bind
port N". Records come from an external source; the runner only reads them to
pick preflight ports and to synthesize ``http://localhost:N`` URLs.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from .url_extractor import localhost_url

logger = logging.getLogger(__name__)

STALE_AFTER_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class PortRecord:
    """A previously detected port; ``script_name=None`` means project-wide."""

    port: int
    script_name: Optional[str]
    source: str
    last_detected_at: float


class PortRecordSource(Protocol):
    """Lookup of the port records known for a project."""

    def records_for(self, project_path: str) -> List[PortRecord]: ...


def is_stale(record: PortRecord, now: Optional[float] = None) -> bool:
    current = time.time() if now is None else now
    return current - record.last_detected_at >= STALE_AFTER_SECONDS


def needs_rescan(records: Sequence[PortRecord], now: Optional[float] = None) -> bool:
    """A project needs rescanning when it has no records or any stale record."""
    if not records:
        return True
    return any(is_stale(record, now) for record in records)


def records_for_script(records: Iterable[PortRecord], script_name: str) -> List[PortRecord]:
    return [record for record in records if record.script_name == script_name]


def select_preflight_records(records: Sequence[PortRecord], script_name: str) -> List[PortRecord]:
    """
    Return the records to probe before running ``script_name``.

    Script-scoped records win; without any, every project record is checked.
    """
    scoped = records_for_script(records, script_name)
    if scoped:
        return scoped
    return list(records)


def scoped_urls(records: Iterable[PortRecord], script_name: str) -> List[str]:
    """``http://localhost:N`` for every record scoped to ``script_name``."""
    urls: list[str] = []
    for record in records_for_script(records, script_name):
        url = localhost_url(record.port)
        if url not in urls:
            urls.append(url)
    return urls


class StaticPortRecordSource:
    """In-memory records keyed by project path."""

    def __init__(self, records: Optional[Dict[str, Sequence[PortRecord]]] = None) -> None:
        self._records: Dict[str, List[PortRecord]] = {}
        for project_path, project_records in (records or {}).items():
            self.set_records(project_path, project_records)

    def set_records(self, project_path: str, records: Sequence[PortRecord]) -> None:
        self._records[_key(project_path)] = list(records)

    def records_for(self, project_path: str) -> List[PortRecord]:
        return list(self._records.get(_key(project_path), []))


class ScanningPortRecordSource:
    """Records discovered from project files, rescanned once they go stale."""

    def __init__(
        self,
        scanner: Optional[Callable[[str], List[PortRecord]]] = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if scanner is None:
            from .port_discovery import discover_ports

            scanner = discover_ports
        self._scanner = scanner
        self._clock = clock
        self._cache: Dict[str, List[PortRecord]] = {}

    def records_for(self, project_path: str) -> List[PortRecord]:
        key = _key(project_path)
        cached = self._cache.get(key, [])
        if needs_rescan(cached, self._clock()):
            logger.debug("Rescanning ports for %s", project_path)
            cached = self._scanner(project_path)
            self._cache[key] = cached
        return list(cached)


def _key(project_path: str) -> str:
    return str(Path(project_path).expanduser().resolve())


__all__ = [
    "PortRecord",
    "PortRecordSource",
    "STALE_AFTER_SECONDS",
    "ScanningPortRecordSource",
    "StaticPortRecordSource",
    "is_stale",
    "needs_rescan",
    "records_for_script",
    "scoped_urls",
    "select_preflight_records",
]
