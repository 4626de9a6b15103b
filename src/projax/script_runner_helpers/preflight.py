"""Proactive port check before a script is spawned."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from ..port_records import PortRecord, select_preflight_records

logger = logging.getLogger(__name__)


class PortInUseProbe(Protocol):
    async def is_port_in_use(self, port: int) -> bool: ...


async def find_occupied_port(
    records: Sequence[PortRecord],
    script_name: str,
    probe: PortInUseProbe,
) -> Optional[int]:
    """Return the first known port of the script that is currently held, if any."""
    checked: set[int] = set()
    for record in select_preflight_records(records, script_name):
        if record.port in checked:
            continue
        checked.add(record.port)
        if await probe.is_port_in_use(record.port):
            logger.debug("Preflight: port %s for %s is in use", record.port, script_name)
            return record.port
    return None
