"""Logging setup for the command-line entry point."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "zkv_router"


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Route `zkv_router` loggers to a rich handler on stderr.

    INFO by default, DEBUG when verbose. Safe to call more than once.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger


def get_logger(name: str, injected: Optional[logging.Logger] = None) -> logging.Logger:
    return injected if injected is not None else logging.getLogger(name)
