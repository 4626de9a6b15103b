"""
Logging setup for projax commands.

setup_logging() installs two root handlers:
- stderr console: bare messages at WARNING in user-friendly mode, full
  records at DEBUG otherwise, nothing at all when PROJAX_QUIET is set
- <data_dir>/{service_name}.log at INFO, truncated on every start unless
  PROJAX_LOG_APPEND=1
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import List, Optional

from projax.config import env_bool, get_settings

_setup_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

_RECORD_FORMAT = logging.Formatter(
    "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s",
    "%Y-%m-%d %H:%M:%S",
)
_SILENT = logging.CRITICAL + 1
_QUIET_LOGGERS = ("asyncio",)


def _drop_root_handlers(root: logging.Logger) -> None:
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        try:
            handler.close()
        except OSError as exc:  # policy_guard: allow-silent-handler
            _MODULE_LOGGER.debug("Closing %r failed: %s", handler, exc)


def _console_handler(user_friendly: bool, quiet: bool) -> logging.Handler:
    # stdout belongs to the child script's output
    handler = logging.StreamHandler(sys.stderr)
    if user_friendly:
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(logging.WARNING)
    else:
        handler.setFormatter(_RECORD_FORMAT)
        handler.setLevel(logging.DEBUG)
    if quiet:
        handler.setLevel(_SILENT)
    return handler


def _service_file_handler(service_name: str, log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    append = env_bool("PROJAX_LOG_APPEND", or_value=False)
    handler = logging.handlers.WatchedFileHandler(log_dir / f"{service_name}.log", mode="a" if append else "w")
    handler.setFormatter(_RECORD_FORMAT)
    handler.setLevel(logging.INFO)
    return handler


def setup_logging(
    service_name: Optional[str] = None,
    user_friendly: bool = False,
    *,
    log_dir: Optional[Path] = None,
) -> None:
    """Replace the root logger's handlers; the file handler needs ``service_name``."""
    settings = get_settings()
    handlers: List[logging.Handler] = [_console_handler(user_friendly, settings.quiet)]
    if service_name:
        handlers.append(_service_file_handler(service_name, log_dir or settings.data_dir))

    with _setup_lock:
        root = logging.getLogger()
        _drop_root_handlers(root)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(logging.INFO if user_friendly else logging.DEBUG)
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["setup_logging"]
