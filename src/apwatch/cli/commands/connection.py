from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from apwatch.cli.common import (
    build_directory,
    build_secret_store,
    build_session,
    load_settings_or_exit,
    run_or_exit,
)
from apwatch.cli.render import access_point_table
from apwatch.models import Roster
from apwatch.storage import load_credentials
from apwatch.utils.redaction import Redactor


def check_connection(
    redact: Annotated[
        bool, typer.Option("--redact", help="Redact MAC addresses in output")
    ] = False,
) -> None:
    """Log in with the stored credentials and list the access points."""
    settings = load_settings_or_exit()
    credentials = load_credentials(build_secret_store(settings))
    console = Console()
    if credentials is None:
        console.print("[red]✗[/red] No controller credentials configured")
        console.print("Use 'apwatch credentials set' first")
        raise typer.Exit(1)

    async def _test() -> Roster:
        async with build_session(settings) as session:
            return await build_directory(settings, session).test_connection(credentials)

    roster = run_or_exit(_test)
    console.print("[green]✓[/green] Connected successfully")
    console.print(access_point_table(list(roster), Redactor(enabled=redact)))
    console.print(f"\nFound {len(roster)} access point(s)")


def register(app: typer.Typer) -> None:
    app.command("test")(check_connection)
