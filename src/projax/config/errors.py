from __future__ import annotations

"""Exception types for configuration handling."""

from pathlib import Path


class ConfigurationError(RuntimeError):
    """Raised when a PROJAX_* setting is missing, malformed or out of range."""

    @classmethod
    def missing(cls, name: str) -> "ConfigurationError":
        return cls(f"Required setting {name} is not set")

    @classmethod
    def invalid_value(cls, name: str, value, reason: str = "") -> "ConfigurationError":
        """Create error for a setting whose value cannot be used."""
        msg = f"Invalid value for {name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)

    @classmethod
    def unreadable(cls, path: Path, reason: str) -> "ConfigurationError":
        """Create error for a defaults file that exists but cannot be used."""
        return cls(f"Cannot load settings from {path}: {reason}")


__all__ = ["ConfigurationError"]
