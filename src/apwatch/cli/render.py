from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from apwatch.models import AccessPoint, ConnectionState, MonitorSnapshot
from apwatch.utils.redaction import Redactor

STATE_STYLES = {
    ConnectionState.CONNECTED: "green",
    ConnectionState.AWAY: "yellow",
    ConnectionState.DISCONNECTED: "dim",
    ConnectionState.ERROR: "red",
    ConnectionState.UNKNOWN: "dim",
}


def access_point_table(
    access_points: list[AccessPoint], redactor: Redactor | None = None
) -> Table:
    redactor = redactor or Redactor(enabled=False)
    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("MAC Address")
    table.add_column("Model")
    table.add_column("Online")
    table.add_column("Adopted")

    for access_point in access_points:
        table.add_row(
            access_point.display_name,
            redactor.redact_mac(access_point.hardware_address),
            access_point.model,
            "yes" if access_point.is_online else "no",
            "yes" if access_point.adopted else "no",
        )
    return table


def print_snapshot(
    console: Console, snapshot: MonitorSnapshot, redactor: Redactor | None = None
) -> None:
    redactor = redactor or Redactor(enabled=False)
    style = STATE_STYLES[snapshot.state]
    console.print(f"Status: [{style}]{snapshot.state.label}[/{style}]")
    if snapshot.ssid:
        console.print(f"Network: {redactor.redact_ssid(snapshot.ssid)}")
    if snapshot.bssid:
        console.print(f"BSSID: {redactor.redact_mac(snapshot.bssid)}")
    if snapshot.access_point is not None:
        access_point = snapshot.access_point
        console.print(
            f"Access point: {access_point.display_name} "
            f"({redactor.redact_mac(access_point.hardware_address)})"
        )
    if snapshot.error:
        console.print(f"[red]{escape(snapshot.error)}[/red]")
    if snapshot.last_updated:
        updated = f"{snapshot.last_updated:%Y-%m-%d %H:%M:%S %Z}"
        console.print(f"[dim]Last updated: {updated}[/dim]")
