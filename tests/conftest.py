"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
import os

import pytest

from projax.config import ProjaxSettings, runtime
from projax.config.settings import get_settings


@pytest.fixture(autouse=True)
def isolated_projax_environment(monkeypatch):
    """Keep developer .env files and PROJAX_* variables out of every test."""
    for name in list(os.environ):
        if name.startswith("PROJAX_"):
            monkeypatch.delenv(name, raising=False)
    runtime._DEFAULT_VALUES = {}
    get_settings.cache_clear()
    yield
    runtime._DEFAULT_VALUES = None
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> ProjaxSettings:
    """Settings rooted in a temporary data directory with short delays."""
    return ProjaxSettings(
        data_dir=tmp_path / "data",
        log_scan_delay_seconds=0.05,
        port_record_delay_seconds=0.05,
        exit_poll_interval_seconds=0.02,
        probe_timeout_seconds=5.0,
        max_conflict_retries=1,
        quiet=True,
    )


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by setup_logging."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            handler.close()
    root_logger.handlers = handlers
    root_logger.setLevel(level)
