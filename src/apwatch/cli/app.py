from __future__ import annotations

from typing import Annotated

import typer

from apwatch.utils.logging import setup_logging

from .commands import cache as cache_cmd
from .commands import config as config_cmd
from .commands import credentials as credentials_cmd
from .commands.connection import register as register_connection
from .commands.match import register as register_match
from .commands.status import register as register_status

app = typer.Typer(
    help="apwatch - know when you are on one of your UniFi access points",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(credentials_cmd.app, name="credentials")
app.add_typer(cache_cmd.app, name="cache")

register_connection(app)
register_match(app)
register_status(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log controller and Wi-Fi activity"),
    ] = False,
) -> None:
    """apwatch CLI."""
    setup_logging("DEBUG" if debug else None)

    if version:
        from apwatch import __version__

        typer.echo(f"apwatch version {__version__}")
        raise typer.Exit()
