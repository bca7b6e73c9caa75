from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from apwatch.cli.common import build_cache, load_settings_or_exit
from apwatch.core import match_access_point
from apwatch.utils.redaction import Redactor


def match(
    bssid: str = typer.Argument(..., help="BSSID to look up, e.g. aa:bb:cc:dd:ee:f1"),
    redact: Annotated[
        bool, typer.Option("--redact", help="Redact MAC addresses in output")
    ] = False,
) -> None:
    """Match a BSSID against the cached access points."""
    settings = load_settings_or_exit()
    roster = build_cache(settings).load()
    console = Console()
    redactor = Redactor(enabled=redact)
    shown = redactor.redact_mac(bssid)

    if roster is None:
        console.print("No access points cached. Run 'apwatch cache update' first.")
        raise typer.Exit(1)

    access_point = match_access_point(bssid, roster)
    if access_point is None:
        console.print(f"[yellow]![/yellow] {shown} is not one of your access points")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] {shown} belongs to {access_point.display_name} "
        f"({redactor.redact_mac(access_point.hardware_address)})"
    )


def register(app: typer.Typer) -> None:
    app.command()(match)
