"""
Common utilities shared across CLI commands.

This module provides:
- Shared console and UI instances
- Error reporting for AudibleError subclasses
- Async runner
"""

import logging
from typing import NoReturn

import typer
from rich.markup import escape

from ..exceptions import AudibleError, ConfigurationError
from ..utils.ui import Icons, console, ui
from .async_utils import run_async

__all__ = [
    "console",
    "fail",
    "Icons",
    "logger",
    "run_async",
    "ui",
]

logger = logging.getLogger(__name__)


def fail(error: AudibleError | str, hint: str | None = None) -> NoReturn:
    """Print an error (and optional hint), then exit with status 1."""
    if isinstance(error, ConfigurationError) and error.missing and hint is None:
        hint = f"Set {' and '.join(error.missing)} in the environment or a .env file"
    ui.error(escape(str(error)))
    if hint:
        ui.muted(f"Hint: {escape(hint)}")
    raise typer.Exit(1)
