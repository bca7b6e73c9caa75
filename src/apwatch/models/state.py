"""Connection state models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from .device import AccessPoint


class ConnectionState(str, Enum):
    CONNECTED = "connected"
    AWAY = "away"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ConnectionState.CONNECTED: "Connected",
    ConnectionState.AWAY: "Away from home",
    ConnectionState.DISCONNECTED: "Not connected",
    ConnectionState.ERROR: "Error",
    ConnectionState.UNKNOWN: "Checking...",
}


class NetworkIdentity(BaseModel):
    """Wi-Fi association reported by the operating system."""

    model_config = {"frozen": True}

    ssid: str | None = None
    bssid: str | None = None


class MonitorSnapshot(BaseModel):
    """Outcome of the latest reconciliation cycle."""

    model_config = {"frozen": True}

    state: ConnectionState = ConnectionState.UNKNOWN
    ssid: str | None = None
    bssid: str | None = None
    access_point: AccessPoint | None = None
    error: str | None = None
    last_updated: datetime | None = None
    updated_at: float | None = None
