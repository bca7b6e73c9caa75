from __future__ import annotations

from typing import Annotated

import typer

from apwatch.cli.common import load_settings_or_exit, resolve_config_path_or_exit
from apwatch.config import (
    CACHE_FILENAME,
    SECRETS_FILENAME,
    Settings,
    data_dir_from_settings,
    render_settings_toml,
    write_settings,
)

app = typer.Typer(no_args_is_help=True, help="Show or create the config file.")


@app.command("show")
def show_config() -> None:
    """Print the effective settings as TOML."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    typer.echo(f"# loaded from {path if exists else 'built-in defaults'}")
    typer.echo(render_settings_toml(settings))


@app.command("paths")
def show_paths() -> None:
    """Print where apwatch reads and writes its files."""
    settings = load_settings_or_exit()
    config_path, exists = resolve_config_path_or_exit(allow_missing=True)
    data_dir = data_dir_from_settings(settings)

    typer.echo(f"config:  {config_path}{'' if exists else ' (missing)'}")
    typer.echo(f"secrets: {data_dir / SECRETS_FILENAME}")
    typer.echo(f"cache:   {data_dir / CACHE_FILENAME}")


@app.command("init")
def init_config(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace an existing config file"),
    ] = False,
) -> None:
    """Write a config file holding the default settings."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)
    if exists and not force:
        typer.echo(f"{path} already exists; use --force to replace it")
        raise typer.Exit(1)

    write_settings(Settings(), path)
    typer.echo(f"Created {path}")
