from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from apwatch.cli.common import (
    build_cache,
    build_monitor,
    build_session,
    load_settings_or_exit,
    run_or_exit,
)
from apwatch.cli.render import access_point_table
from apwatch.models import Roster
from apwatch.utils.redaction import Redactor

app = typer.Typer(no_args_is_help=True, help="Inspect the cached access point list.")


@app.command("show")
def show_cache(
    redact: Annotated[
        bool, typer.Option("--redact", help="Redact MAC addresses in output")
    ] = False,
) -> None:
    """List cached access points."""
    settings = load_settings_or_exit()
    cache = build_cache(settings)
    console = Console()

    roster = cache.load()
    if roster is None:
        console.print("No access points cached")
        return

    console.print(access_point_table(list(roster), Redactor(enabled=redact)))
    saved_at = cache.timestamp()
    console.print(f"\n{len(roster)} access points cached")
    if saved_at:
        console.print(f"Last updated: {saved_at:%Y-%m-%d %H:%M:%S %Z}")


@app.command("update")
def update_cache() -> None:
    """Fetch access points from the controller and cache them."""
    settings = load_settings_or_exit()

    async def _update() -> Roster:
        async with build_session(settings) as session:
            return await build_monitor(settings, session).update_cache()

    roster = run_or_exit(_update)
    Console().print(f"[green]✓[/green] Cached {len(roster)} access point(s)")


@app.command("clear")
def clear_cache() -> None:
    """Delete the cached access points."""
    settings = load_settings_or_exit()
    build_cache(settings).clear()
    Console().print("[green]✓[/green] Cache cleared")
