from __future__ import annotations

from .directory import DeviceDirectory, parse_roster
from .matcher import MIN_MATCHING_OCTETS, match_access_point, matching_octets
from .monitor import AccessPointMonitor, derive_state
from .session import AUTH_STRATEGIES, ControllerSession

__all__ = [
    "AUTH_STRATEGIES",
    "AccessPointMonitor",
    "ControllerSession",
    "DeviceDirectory",
    "MIN_MATCHING_OCTETS",
    "derive_state",
    "match_access_point",
    "matching_octets",
    "parse_roster",
]
