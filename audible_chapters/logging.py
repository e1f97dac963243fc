"""
Logging setup for the audible_chapters package.

Library modules log through ``logging.getLogger(__name__)`` and never add
handlers; the CLI calls ``configure_logging()`` once to attach a Rich console
handler (and optionally a plain file handler) to the package logger.

Usage:
    from audible_chapters.logging import configure_logging

    configure_logging(level="debug", rich_tracebacks=False)

Fetch failures and registrations carry structured ``extra`` fields
(``event``, ``asin``, ``status_code``, ...) so handlers and tests can read
them off the LogRecord instead of parsing the message.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Literal

from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from .utils.ui import console as rich_console

LogLevel = Literal["debug", "info", "warning", "error", "critical"]

LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

MODULE_LOGGER_NAME = "audible_chapters"

PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Structured event names
EVENT_CHAPTER_FETCH_FAILED = "chapter_fetch_failed"
EVENT_CHAPTER_FETCHED = "chapter_fetched"
EVENT_DEVICE_REGISTERED = "device_registered"
EVENT_AUTHENTICATED = "authenticated"


def get_level(level: LogLevel | int) -> int:
    """Level name or number to a logging constant; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    return LEVEL_MAP.get(level.lower(), logging.INFO)


def get_logger(name: str | None = None) -> logging.Logger:
    """Named logger, or the package logger when ``name`` is None."""
    return logging.getLogger(name if name is not None else MODULE_LOGGER_NAME)


def event_extra(event: str, **fields: Any) -> dict[str, Any]:
    """Build the ``extra`` mapping for a structured diagnostic event."""
    return {"event": event, **fields}


def configure_logging(
    level: LogLevel | int = "info",
    console_output: bool = True,
    file_path: str | Path | None = None,
    use_rich: bool = True,
    rich_tracebacks: bool = True,
) -> logging.Logger:
    """
    Attach handlers to the package logger, replacing any from an earlier call.

    Args:
        level: Level for the logger and every handler
        console_output: Add a console handler
        file_path: Also log to this file (plain format, parent dirs created)
        use_rich: RichHandler with markup instead of a plain stdout handler
        rich_tracebacks: Install Rich's traceback hook (affects the whole process)

    Returns:
        The package logger
    """
    log_level = get_level(level)

    if use_rich and rich_tracebacks:
        install_rich_traceback(console=rich_console, show_locals=False, word_wrap=True)

    logger = logging.getLogger(MODULE_LOGGER_NAME)
    logger.setLevel(log_level)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    if console_output:
        console_handler: logging.Handler
        if use_rich:
            console_handler = RichHandler(
                level=log_level,
                console=rich_console,
                show_path=False,
                rich_tracebacks=rich_tracebacks,
                markup=True,
                log_time_format="[%X]",
                keywords=["ASIN", "ADP", "region", "chapters"],
            )
        else:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(console_handler)

    if file_path:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    return logger


def silence_http_logging() -> None:
    """Keep httpx/httpcore per-request INFO lines (full URLs) out of the console."""
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = [
    "MODULE_LOGGER_NAME",
    "EVENT_AUTHENTICATED",
    "EVENT_CHAPTER_FETCHED",
    "EVENT_CHAPTER_FETCH_FAILED",
    "EVENT_DEVICE_REGISTERED",
    "configure_logging",
    "event_extra",
    "get_level",
    "get_logger",
    "silence_http_logging",
]
