"""apwatch - know when this machine is on one of your UniFi access points."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import (
    AccessPointMonitor,
    ControllerSession,
    DeviceDirectory,
    derive_state,
    match_access_point,
)
from .models import (
    AccessPoint,
    ConnectionState,
    ControllerCredentials,
    Dialect,
    MonitorSnapshot,
    NetworkIdentity,
    Roster,
)
from .storage import FileSecretStore, RosterCache

__all__ = [
    "AccessPoint",
    "AccessPointMonitor",
    "ConnectionState",
    "ControllerCredentials",
    "ControllerSession",
    "DeviceDirectory",
    "Dialect",
    "FileSecretStore",
    "MonitorSnapshot",
    "NetworkIdentity",
    "Roster",
    "RosterCache",
    "Settings",
    "__version__",
    "derive_state",
    "get_settings",
    "match_access_point",
]

__version__ = version("apwatch")
