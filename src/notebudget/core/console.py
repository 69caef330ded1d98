"""Rich consoles and logging for notebudget.

Command output goes to `console` (stdout) so it can be piped; log records
go to `stderr_console` through a single RichHandler on the root logger.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "notebudget"

console = Console()
stderr_console = Console(stderr=True)


def resolve_level(level: str | int, verbose: bool = False) -> int:
    """Map a level name or number to a logging level; `verbose` forces DEBUG."""
    if verbose:
        return logging.DEBUG
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _rich_handler(level: int) -> RichHandler:
    # Log messages carry user text (prompts, paths), so markup stays off.
    handler = RichHandler(
        console=stderr_console,
        level=level,
        markup=False,
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(level: str | int = logging.INFO, verbose: bool = False) -> logging.Logger:
    """Install the Rich handler on the root logger and return the package logger.

    Calling this again replaces the handler instead of stacking a new one.
    """
    numeric_level = resolve_level(level, verbose)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_rich_handler(numeric_level))
    root.setLevel(numeric_level)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(numeric_level)
    return package_logger


def get_console(stderr: bool = False) -> Console:
    return stderr_console if stderr else console


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or LOGGER_NAME)
