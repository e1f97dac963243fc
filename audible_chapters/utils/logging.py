"""
Rich-markup log helper for user-facing milestones.
"""

import logging
from typing import Any


def log_success(
    message: str,
    *args: Any,
    logger_name: str | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> None:
    """
    Log ``message`` at INFO behind a green checkmark.

    ``logger`` wins over ``logger_name``; with neither, the root logger is used.
    Extra positional/keyword arguments go to ``Logger.info`` unchanged.
    """
    if logger is None:
        logger = logging.getLogger(logger_name) if logger_name else logging.getLogger()
    logger.info("[green]✓[/green] " + message, *args, **kwargs)
