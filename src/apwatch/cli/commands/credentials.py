from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from apwatch.cli.common import build_secret_store, load_settings_or_exit
from apwatch.errors import InvalidInputError, SecretNotFoundError
from apwatch.storage import (
    ACCOUNT_URL,
    build_credentials,
    credential_presence,
    delete_credentials,
    save_credentials,
)
from apwatch.utils.redaction import Redactor

app = typer.Typer(no_args_is_help=True, help="Manage controller credentials.")


@app.command("set")
def set_credentials(
    url: Annotated[
        str,
        typer.Option("--url", prompt="Controller URL", help="e.g. https://192.168.1.1"),
    ],
    username: Annotated[str, typer.Option("--username", "-u", prompt=True)],
    password: Annotated[
        str, typer.Option("--password", "-p", prompt=True, hide_input=True)
    ],
) -> None:
    """Store the controller URL, username and password."""
    console = Console()
    try:
        credentials = build_credentials(url, username, password)
    except InvalidInputError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    settings = load_settings_or_exit()
    store = build_secret_store(settings)
    save_credentials(store, credentials)
    console.print(f"[green]✓[/green] Credentials saved to {store.path}")


@app.command("show")
def show_credentials(
    redact: Annotated[
        bool, typer.Option("--redact", help="Redact the controller host")
    ] = False,
) -> None:
    """Show which credentials are stored. The password is never printed."""
    settings = load_settings_or_exit()
    store = build_secret_store(settings)
    console = Console()

    presence = credential_presence(store)
    for account, present in presence.items():
        marker = "[green]✓[/green]" if present else "[red]✗[/red]"
        console.print(f"{marker} {account}")

    if presence[ACCOUNT_URL]:
        try:
            url = store.get(ACCOUNT_URL)
        except SecretNotFoundError:
            return
        console.print(f"Controller: {Redactor(enabled=redact).redact_url(url)}")


@app.command("clear")
def clear_credentials() -> None:
    """Delete stored credentials."""
    settings = load_settings_or_exit()
    delete_credentials(build_secret_store(settings))
    Console().print("[green]✓[/green] Credentials cleared")
