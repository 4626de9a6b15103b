"""
Console output utilities for user-facing runner messages.

Progress messages ("Killing process 123 on port 3000...") are for the person at
the terminal and are kept separate from diagnostic logging. Everything goes to
stderr so the child's stdout stream stays clean.
"""

import logging
import sys
from typing import Callable, Optional

ConsoleFunc = Callable[[str], None]


def output(
    message: str,
    level: str = "info",
    console: bool = True,
    log: bool = True,
    logger_name: Optional[str] = None,
) -> None:
    """
    Write ``message`` to the console and/or the log.

    Examples:
        output("✓ Process killed. Retrying...")
        output("Port 3000 is in use", level="warning")
        output("lsof exited 2", console=False, level="debug")
    """
    if console:
        sys.stderr.write(message + "\n")
        sys.stderr.flush()

    if log:
        logger = logging.getLogger(logger_name or __name__)
        log_method = getattr(logger, level.lower(), logger.info)
        log_method(message)


def make_console(quiet: bool = False, *, logger_name: Optional[str] = None) -> ConsoleFunc:
    """Return a console callable; quiet consoles only log."""

    def _console(message: str) -> None:
        output(message, console=not quiet, log=True, logger_name=logger_name, level="debug")

    return _console


__all__ = ["ConsoleFunc", "make_console", "output"]
