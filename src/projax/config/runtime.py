"""
Environment-backed settings lookup.

A setting is read from the process environment first. When it is unset (or
blank) the defaults collected from ``./.env``, ``~/.projax/.env`` and
``~/.projax/config.json`` are consulted, in that order.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".projax" / ".env")
_JSON_ENV_CANDIDATES = (Path.home() / ".projax" / "config.json",)

_DEFAULT_VALUES: dict[str, str] | None = None


def _load_default_values() -> dict[str, str]:
    """Collect defaults once; earlier files win over later ones."""
    from .runtime_helpers import DotenvLoader, JsonConfigLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is not None:
        return _DEFAULT_VALUES

    sources = [DotenvLoader.load_from_file(path) for path in _DOTENV_CANDIDATES]
    sources += [JsonConfigLoader.load_from_file(path) for path in _JSON_ENV_CANDIDATES]

    defaults: dict[str, str] = {}
    for source in sources:
        for key, value in source.items():
            defaults.setdefault(key, value)

    _DEFAULT_VALUES = defaults
    return defaults


def _lookup(name: str, *, strip: bool, allow_blank: bool) -> Optional[str]:
    for value in (os.getenv(name), _load_default_values().get(name)):
        if value is None:
            continue
        if strip:
            value = value.strip()
        if value or allow_blank:
            return value
    return None


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
    strip: bool = True,
    allow_blank: bool = False,
) -> str | None:
    """Fetch a setting as a string."""
    value = _lookup(name, strip=strip, allow_blank=allow_blank)
    if value is not None:
        return value
    if required:
        raise ConfigurationError.missing(name)
    return or_value


def _env_typed(
    name: str,
    or_value: Optional[T],
    required: bool,
    parse: Callable[[str], T],
    expected: str,
) -> Optional[T]:
    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError.missing(name)
        return or_value
    try:
        return parse(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid_value(name, raw, f"Expected {expected}") from exc


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(raw)


def env_int(name: str, or_value: int | None = None, *, required: bool = False) -> int | None:
    return _env_typed(name, or_value, required, int, "an integer")


def env_float(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    return _env_typed(name, or_value, required, float, "a number")


def env_bool(name: str, or_value: bool | None = None, *, required: bool = False) -> bool | None:
    return _env_typed(name, or_value, required, _parse_bool, "a boolean such as true/false, yes/no or 1/0")


def env_seconds(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Fetch a non-negative duration in (possibly fractional) seconds."""
    value = env_float(name, or_value=or_value, required=required)
    if value is not None and value < 0:
        raise ConfigurationError.invalid_value(name, value, "Durations cannot be negative")
    return value


__all__ = [
    "ConfigurationError",
    "env_bool",
    "env_float",
    "env_int",
    "env_seconds",
    "env_str",
]
