"""Read defaults from ``~/.projax/config.json``."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import orjson

from ..errors import ConfigurationError


def _as_env_text(value) -> str:
    # Mirrors how the same value would be spelled in a .env file.
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


class JsonConfigLoader:
    """Loads a flat ``{"PROJAX_NAME": scalar}`` object as environment-style strings."""

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Raises:
            ConfigurationError: the file is unreadable, not JSON, not an
                object, or holds a nested value
        """
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise ConfigurationError.unreadable(path, exc.strerror or str(exc)) from exc

        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise ConfigurationError.unreadable(path, f"invalid JSON ({exc})") from exc
        if not isinstance(payload, dict):
            raise ConfigurationError.unreadable(path, "top level must be an object")

        nested = [key for key, value in payload.items() if isinstance(value, (dict, list))]
        if nested:
            raise ConfigurationError.unreadable(path, f"nested values are not supported ({', '.join(nested)})")
        return {str(key): _as_env_text(value) for key, value in payload.items()}
