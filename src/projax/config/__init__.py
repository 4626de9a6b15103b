"""Shared configuration helpers and dataclasses."""

from .errors import ConfigurationError
from .runtime import (
    env_bool,
    env_float,
    env_int,
    env_seconds,
    env_str,
)
from .settings import ProjaxSettings, get_settings, load_settings

__all__ = [
    "ConfigurationError",
    "ProjaxSettings",
    "env_bool",
    "env_float",
    "env_int",
    "env_seconds",
    "env_str",
    "get_settings",
    "load_settings",
]
