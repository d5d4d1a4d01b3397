"""Logging configuration for the command line.

Library modules only create loggers; handlers are attached here (console) or
by the TUI (log panel).
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s - %(message)s"
LOGGER_NAME = "truthlens"


def configure_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    """Attach a Rich handler to the package logger.

    Calling it again replaces the previous handler instead of stacking another.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
