"""
Rich UI utilities for console output.

Usage:
    from audible_chapters.utils.ui import console, ui

    ui.success("Device registered")
    ui.error("Authentication failed", details="status 401")

    with ui.spinner("Fetching chapters..."):
        ...

    table = ui.create_table("Chapters", columns=["#", "Title", "Start"])
    console.print(table)
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from rich.box import DOUBLE, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

# =============================================================================
# Custom Theme
# =============================================================================

CHAPTERS_THEME = Theme(
    {
        # Status colors
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "debug": "dim",
        "muted": "dim white",
        # UI elements
        "header": "bold magenta",
        "subheader": "bold blue",
        "accent": "bold cyan",
        # Data types
        "asin": "cyan",
        "title": "bold white",
        "duration": "green",
        "region": "magenta",
        "secret": "yellow",
    }
)

# =============================================================================
# Global Console
# =============================================================================

console = Console(theme=CHAPTERS_THEME, highlight=True, emoji=True)

# =============================================================================
# Icons & Symbols
# =============================================================================


class Icons:
    """Unicode icons for consistent visual feedback."""

    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "⚠"

    BOOK = "📚"
    FILE = "📄"
    KEY = "🔑"
    GLOBE = "🌐"


# =============================================================================
# UI Helper Class
# =============================================================================


class UIHelper:
    """Central UI helper for consistent visual output."""

    def __init__(self, console: Console):
        self.console = console
        self.icons = Icons

    def _status(self, style: str, prefix: str, message: str, details: str | None) -> None:
        text = Text()
        text.append(f"{prefix} ", style=style)
        text.append_text(Text.from_markup(message))
        if details:
            text.append(f"\n   {details}", style="muted")
        self.console.print(text)

    def success(self, message: str, details: str | None = None, prefix: str = Icons.SUCCESS) -> None:
        """Print a success message."""
        self._status("success", prefix, message, details)

    def error(self, message: str, details: str | None = None, prefix: str = Icons.ERROR) -> None:
        """Print an error message."""
        self._status("error", prefix, f"[error]{message}[/error]", details)

    def warning(self, message: str, details: str | None = None, prefix: str = Icons.WARNING) -> None:
        self._status("warning", prefix, message, details)

    def muted(self, message: str) -> None:
        self.console.print(f"[muted]{message}[/muted]")

    def header(self, title: str, subtitle: str | None = None, icon: str | None = None, style: str = "header") -> None:
        """Print a styled header banner."""
        icon_str = f"{icon} " if icon else ""
        content = Text()
        content.append(f"{icon_str}{title}", style=style)
        if subtitle:
            content.append(f"\n{subtitle}", style="muted")

        self.console.print()
        self.console.print(Panel(content, box=DOUBLE, border_style=style, padding=(1, 2)))
        self.console.print()

    @contextmanager
    def spinner(self, message: str, spinner_name: str = "dots", style: str = "info") -> Generator[Status]:
        """Context manager for spinner with status updates."""
        with self.console.status(f"[{style}]{message}[/{style}]", spinner=spinner_name) as status:
            yield status

    def create_table(
        self,
        title: str | None = None,
        columns: list[str] | None = None,
        show_header: bool = True,
        box_style: Any = ROUNDED,
        header_style: str = "bold cyan",
        border_style: str = "dim",
    ) -> Table:
        """Create a styled table."""
        table = Table(
            title=title,
            show_header=show_header,
            box=box_style,
            header_style=header_style,
            border_style=border_style,
            row_styles=["", "dim"],
        )
        for col in columns or []:
            table.add_column(col)
        return table

    def key_value_table(
        self,
        data: dict[str, Any],
        title: str | None = None,
        key_style: str = "bold cyan",
        value_style: str = "white",
    ) -> Table:
        """Create a two-column key-value table."""
        table = Table(title=title, show_header=False, box=SIMPLE, padding=(0, 1), expand=False)
        table.add_column("Key", style=key_style, no_wrap=True)
        table.add_column("Value", style=value_style)

        for key, value in data.items():
            table.add_row(key, str(value) if value is not None else "[dim]N/A[/dim]")

        return table


ui = UIHelper(console)

__all__ = [
    "console",
    "ui",
    "Icons",
    "UIHelper",
    "CHAPTERS_THEME",
    "Table",
    "Text",
]
