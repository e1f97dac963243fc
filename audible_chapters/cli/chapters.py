"""
Chapter CLI command.

Fetches chapter metadata for one or more ASINs and prints a table per item,
or the normalized JSON with --json.
"""

import json

import typer
from rich.markup import escape

from ..chapters import ChapterSet, process_many
from ..config import get_settings
from ..exceptions import AudibleError, ValidationError
from .common import Icons, console, fail, run_async, ui


def _format_ms(ms: int) -> str:
    seconds, millis = divmod(ms, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def _print_chapter_set(chapter_set: ChapterSet) -> None:
    title = f"{Icons.BOOK} {chapter_set.asin} ({chapter_set.region})"
    table = ui.create_table(title=title, columns=["#", "Title", "Start", "Length"])
    for index, chapter in enumerate(chapter_set.chapters, 1):
        table.add_row(str(index), escape(chapter.title), _format_ms(chapter.start_offset_ms), _format_ms(chapter.length_ms))
    console.print(table)

    summary: dict[str, object] = {"Chapters": chapter_set.chapter_count}
    if chapter_set.runtime_hours is not None:
        summary["Runtime"] = f"{chapter_set.runtime_hours} h"
    if chapter_set.is_accurate is not None:
        summary["Accurate"] = "yes" if chapter_set.is_accurate else "no"
    console.print(ui.key_value_table(summary))


def chapters_command(
    asins: list[str] = typer.Argument(..., help="One or more ASINs"),
    region: str | None = typer.Option(None, "--region", "-r", help="Marketplace region (default: AUDIBLE_REGION or us)"),
    as_json: bool = typer.Option(False, "--json", "-j", help="Print normalized JSON"),
    max_concurrent: int | None = typer.Option(None, "--max-concurrent", "-m", help="Concurrent requests"),
):
    """
    Fetch chapters for ASINs using ADP_TOKEN / PRIVATE_KEY from the environment.
    """
    settings = get_settings()

    try:
        with ui.spinner(f"Fetching chapters for {len(asins)} item(s)..."):
            results = run_async(
                process_many(
                    asins,
                    region or settings.audible.region,
                    settings=settings.credentials,
                    timeout=settings.audible.timeout,
                    max_concurrent=max_concurrent or settings.audible.max_concurrent_requests,
                )
            )
    except ValidationError as e:
        fail(e, hint="Audible changed the response shape for this item")
    except AudibleError as e:
        fail(e)

    if as_json:
        payload = {asin: (chapter_set.to_api() if chapter_set else None) for asin, chapter_set in results.items()}
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for asin, chapter_set in results.items():
            if chapter_set is None:
                ui.warning(f"No chapters available for {asin}")
            else:
                _print_chapter_set(chapter_set)

    if all(chapter_set is None for chapter_set in results.values()):
        raise typer.Exit(1)
