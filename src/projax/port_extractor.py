"""Extract a conflicting port number from process output.

Dev servers report an occupied port in many shapes::

    Port 3000 is already in use
    Error: listen EADDRINUSE: address already in use 0.0.0.0:4000
    Address already in use: 5432
    Failed to start: :3000 (EADDRINUSE)

``extract_port`` scans the whole text (stack traces included) and returns the
port that appears first.
"""

from __future__ import annotations

import re
from typing import Optional

MIN_PORT = 1
MAX_PORT = 65535

# Ordered by priority; priority only matters for matches at the same offset.
_PORT_CONFLICT_PATTERNS = (
    re.compile(r"\b[a-z]+\s+(\d+)\s+(?:(?:is|are)\s+)?(?:already\s+)?(?:in\s+use|taken)", re.IGNORECASE),
    re.compile(
        r"EADDRINUSE[^:]*:\s*(?:address\s+already\s+in\s+use[^:]*:)?\s*(?:::|0\.0\.0\.0|127\.0\.0\.1|localhost)?:?(\d+)",
        re.IGNORECASE,
    ),
    re.compile(r"address\s+already\s+in\s+use[^:]*:?\s*(\d+)", re.IGNORECASE),
    re.compile(r":(\d+)\s+\(EADDRINUSE\)", re.IGNORECASE),
)


def is_valid_port(value: int) -> bool:
    return MIN_PORT <= value <= MAX_PORT


def extract_port(text: Optional[str]) -> Optional[int]:
    """Return the first plausible conflicting port in ``text``, or ``None``."""
    if not text:
        return None

    best: Optional[tuple[int, int, int]] = None
    for priority, pattern in enumerate(_PORT_CONFLICT_PATTERNS):
        for match in pattern.finditer(text):
            port = int(match.group(1))
            if not is_valid_port(port):
                continue
            candidate = (match.start(1), priority, port)
            if best is None or candidate < best:
                best = candidate
            # Later matches of this pattern start further right.
            break

    if best is None:
        return None
    return best[2]


__all__ = ["MAX_PORT", "MIN_PORT", "extract_port", "is_valid_port"]
