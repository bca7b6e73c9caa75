from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console

from apwatch.cli.common import build_monitor, build_session, load_settings_or_exit
from apwatch.cli.render import print_snapshot
from apwatch.models import ConnectionState, MonitorSnapshot
from apwatch.utils.redaction import Redactor

logger = logging.getLogger(__name__)


def status(
    refresh: Annotated[
        bool,
        typer.Option("--refresh", help="Ignore the cached access points"),
    ] = False,
    redact: Annotated[
        bool, typer.Option("--redact", help="Redact sensitive values in output")
    ] = False,
) -> None:
    """Check once whether this machine is on one of your access points."""
    settings = load_settings_or_exit()

    async def _check() -> MonitorSnapshot | None:
        async with build_session(settings) as session:
            monitor = build_monitor(settings, session)
            if refresh:
                return await monitor.force_refresh()
            return await monitor.refresh()

    snapshot = asyncio.run(_check())
    if snapshot is None:
        raise typer.Exit(1)

    print_snapshot(Console(), snapshot, Redactor(enabled=redact))
    if snapshot.state is ConnectionState.ERROR:
        raise typer.Exit(1)


def watch(
    interval: Annotated[
        float | None,
        typer.Option("--interval", "-i", min=1.0, help="Seconds between checks"),
    ] = None,
    redact: Annotated[
        bool, typer.Option("--redact", help="Redact sensitive values in output")
    ] = False,
) -> None:
    """Keep checking on a timer and print every state change."""
    settings = load_settings_or_exit()
    if interval is not None:
        settings = settings.model_copy(
            update={"monitor": settings.monitor.model_copy(update={"interval": interval})}
        )
    console = Console()
    redactor = Redactor(enabled=redact)
    last: tuple[ConnectionState, str | None, str | None] | None = None

    def _on_snapshot(snapshot: MonitorSnapshot) -> None:
        nonlocal last
        key = (
            snapshot.state,
            snapshot.access_point.id if snapshot.access_point else None,
            snapshot.error,
        )
        if key == last:
            return
        last = key
        print_snapshot(console, snapshot, redactor)
        console.print()

    async def _watch() -> None:
        async with build_session(settings) as session:
            monitor = build_monitor(settings, session)
            monitor.add_listener(_on_snapshot)
            console.print(
                f"Checking every {monitor.interval:g}s. Press Ctrl+C to stop.\n"
            )
            await monitor.run()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        logger.debug("Watch interrupted")


def register(app: typer.Typer) -> None:
    app.command()(status)
    app.command()(watch)
