"""
CLI entry point.

Assembles the subcommands from the cli modules into the `audible-chapters` app.
"""

import logging

import typer

from ..logging import configure_logging, silence_http_logging
from ..regions import list_regions
from .auth import auth_app
from .chapters import chapters_command
from .common import Icons, console, ui

app = typer.Typer(
    name="audible-chapters",
    help="🎧 Audible chapter metadata client",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(auth_app, name="auth")
app.command("chapters")(chapters_command)

logger = logging.getLogger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info-level logs"),
    debug: bool = typer.Option(False, "--debug", help="Show debug-level logs"),
):
    """Audible chapter metadata client."""
    level = "debug" if debug else "info" if verbose else "warning"
    configure_logging(level=level, rich_tracebacks=debug)
    if not debug:
        silence_http_logging()


@app.command("regions")
def regions():
    """List supported marketplace regions."""
    table = ui.create_table(title=f"{Icons.GLOBE} Audible Regions", columns=["Code", "Name", "Domain", "Chapter"])
    for region in list_regions():
        table.add_row(region.code, region.name, region.domain, region.chapter_noun)
    console.print(table)


if __name__ == "__main__":
    app()
