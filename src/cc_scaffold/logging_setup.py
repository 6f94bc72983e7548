"""Logging configuration for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_FORMAT = "%(message)s"


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Route the package's log records to stderr through rich.

    Args:
        level: Logging level name or constant
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    # Clear existing handlers so repeated CLI invocations don't duplicate output
    package_logger = logging.getLogger("cc_scaffold")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
