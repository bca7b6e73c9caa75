"""Data models for apwatch."""

from apwatch.models.controller import ControllerCredentials, Dialect, SessionState
from apwatch.models.device import (
    AccessPoint,
    CachedRoster,
    Roster,
    normalize_address,
)
from apwatch.models.state import ConnectionState, MonitorSnapshot, NetworkIdentity

__all__ = [
    "AccessPoint",
    "CachedRoster",
    "ConnectionState",
    "ControllerCredentials",
    "Dialect",
    "MonitorSnapshot",
    "NetworkIdentity",
    "Roster",
    "SessionState",
    "normalize_address",
]
