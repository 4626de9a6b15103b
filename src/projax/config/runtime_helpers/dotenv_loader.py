"""Read ``PROJAX_`` defaults from ``.env`` files."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

from ..errors import ConfigurationError

_KEY_PREFIX = "PROJAX_"
_EXPORT = "export "


class DotenvLoader:
    """
    Minimal ``.env`` reader.

    Supports ``KEY=value``, ``export KEY=value`` and values wrapped in single
    or double quotes. Keys outside the ``PROJAX_`` namespace are dropped so a
    project's own ``.env`` never changes runner behaviour.
    """

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        if not path.is_file():
            return {}
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError.unreadable(path, str(exc)) from exc

        values: Dict[str, str] = {}
        for line in text.splitlines():
            pair = DotenvLoader.parse_line(line)
            if pair is not None and pair[0].startswith(_KEY_PREFIX):
                values[pair[0]] = pair[1]
        return values

    @staticmethod
    def parse_line(line: str) -> Optional[Tuple[str, str]]:
        """Return ``(key, value)`` for an assignment line, None for anything else."""
        line = line.strip()
        if line.startswith("#") or "=" not in line:
            return None
        key, _, value = line.partition("=")
        key = key.strip()
        if key.startswith(_EXPORT):
            key = key[len(_EXPORT) :].strip()
        if not key:
            return None
        return key, _unquote(value.strip())


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value
