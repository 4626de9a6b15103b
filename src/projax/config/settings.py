"""Settings consumed by the script runner and the process registry."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .errors import ConfigurationError
from .runtime import env_bool, env_int, env_seconds, env_str

DEFAULT_DATA_DIR = Path.home() / ".projax"
REGISTRY_FILENAME = "processes.json"
LOGS_DIRNAME = "logs"


@dataclass(frozen=True)
class ProjaxSettings:
    data_dir: Path
    log_scan_delay_seconds: float = 5.0
    port_record_delay_seconds: float = 5.0
    exit_poll_interval_seconds: float = 0.5
    probe_timeout_seconds: float = 5.0
    max_conflict_retries: int = 1
    quiet: bool = False

    @property
    def registry_path(self) -> Path:
        return self.data_dir / REGISTRY_FILENAME

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / LOGS_DIRNAME


def load_settings() -> ProjaxSettings:
    """Build settings from the environment and configured defaults."""
    data_dir_value = env_str("PROJAX_DATA_DIR")
    data_dir = Path(data_dir_value).expanduser() if data_dir_value else DEFAULT_DATA_DIR

    max_retries = env_int("PROJAX_MAX_CONFLICT_RETRIES", or_value=1)
    if max_retries is None or max_retries < 0:
        raise ConfigurationError.invalid_value("PROJAX_MAX_CONFLICT_RETRIES", max_retries, "Must be zero or greater")

    poll_interval = env_seconds("PROJAX_EXIT_POLL_INTERVAL_SECONDS", or_value=0.5)
    if not poll_interval:
        raise ConfigurationError.invalid_value("PROJAX_EXIT_POLL_INTERVAL_SECONDS", poll_interval, "Must be positive")

    return ProjaxSettings(
        data_dir=data_dir,
        log_scan_delay_seconds=float(env_seconds("PROJAX_LOG_SCAN_DELAY_SECONDS", or_value=5.0)),
        port_record_delay_seconds=float(env_seconds("PROJAX_PORT_RECORD_DELAY_SECONDS", or_value=5.0)),
        exit_poll_interval_seconds=float(poll_interval),
        probe_timeout_seconds=float(env_seconds("PROJAX_PROBE_TIMEOUT_SECONDS", or_value=5.0)),
        max_conflict_retries=int(max_retries),
        quiet=bool(env_bool("PROJAX_QUIET", or_value=False)),
    )


@lru_cache(maxsize=1)
def get_settings() -> ProjaxSettings:
    return load_settings()


__all__ = ["ProjaxSettings", "get_settings", "load_settings"]
