"""Logging setup for the cardtransfer CLI."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "cardtransfer"


def configure_logging(level: str = "WARNING", console: Optional[Console] = None) -> logging.Logger:
    """Attach a rich handler to the package logger.

    Repeated calls only adjust the level so handlers are never duplicated.

    Args:
        level: Logging level name such as ``INFO`` or ``DEBUG``.
        console: Console to render to; defaults to stderr.

    Returns:
        logging.Logger: The configured package logger.
    """
    resolved = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved)

    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(resolved)
            return logger

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "PACKAGE_LOGGER"]
