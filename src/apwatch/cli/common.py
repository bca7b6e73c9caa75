from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from apwatch.config import (
    CACHE_FILENAME,
    SECRETS_FILENAME,
    Settings,
    data_dir_from_settings,
    get_settings,
    resolve_config_path,
)
from apwatch.core import AccessPointMonitor, ControllerSession, DeviceDirectory
from apwatch.errors import ApWatchError
from apwatch.storage import FileSecretStore, RosterCache
from apwatch.wifi import NetworkIdentityProvider, NmcliIdentityProvider

T = TypeVar("T")


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_secret_store(settings: Settings) -> FileSecretStore:
    return FileSecretStore(data_dir_from_settings(settings) / SECRETS_FILENAME)


def build_cache(settings: Settings) -> RosterCache:
    return RosterCache(data_dir_from_settings(settings) / CACHE_FILENAME)


def build_identity_provider(settings: Settings) -> NetworkIdentityProvider:
    return NmcliIdentityProvider(settings.wifi.interface, timeout=settings.wifi.timeout)


def build_session(settings: Settings) -> ControllerSession:
    return ControllerSession(timeout=settings.controller.timeout)


def build_directory(settings: Settings, session: ControllerSession) -> DeviceDirectory:
    return DeviceDirectory(session, site=settings.controller.site)


def build_monitor(settings: Settings, session: ControllerSession) -> AccessPointMonitor:
    return AccessPointMonitor(
        build_directory(settings, session),
        build_identity_provider(settings),
        build_secret_store(settings),
        build_cache(settings),
        interval=settings.monitor.interval,
        use_cache=settings.monitor.use_cache,
    )


def run_or_exit(factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Run a coroutine, turning apwatch errors into a failed exit."""
    try:
        return asyncio.run(factory())
    except ApWatchError as exc:
        Console(stderr=True).print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

