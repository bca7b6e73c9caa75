"""Read the current Wi-Fi association from the operating system."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from typing import Protocol

from apwatch.errors import IdentityError, PermissionDeniedError
from apwatch.models import NetworkIdentity

logger = logging.getLogger(__name__)

DENIED_MARKERS = ("not authorized", "permission denied")


class NetworkIdentityProvider(Protocol):
    def has_permission(self) -> bool: ...

    def current_identity(self) -> NetworkIdentity | None: ...


def split_nmcli_fields(line: str) -> list[str]:
    """Split a terse nmcli row, honouring ``\\:`` and ``\\\\`` escapes."""

    fields: list[str] = []
    current: list[str] = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


class NmcliIdentityProvider:
    """Query NetworkManager for the active SSID and BSSID."""

    def __init__(self, interface: str | None = None, *, timeout: float = 5.0) -> None:
        self._interface = interface
        self._timeout = timeout

    def has_permission(self) -> bool:
        return shutil.which("nmcli") is not None

    def _run(self, args: Sequence[str]) -> str:
        try:
            completed = subprocess.run(
                list(args),
                check=True,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise IdentityError("nmcli command unavailable") from exc
        except subprocess.TimeoutExpired as exc:
            raise IdentityError("nmcli command timed out") from exc
        except subprocess.CalledProcessError as exc:
            error_output = exc.stderr.strip() or exc.stdout.strip() or str(exc)
            if any(marker in error_output.lower() for marker in DENIED_MARKERS):
                raise PermissionDeniedError(error_output) from exc
            raise IdentityError(error_output) from exc
        except OSError as exc:
            raise IdentityError(f"Unable to run nmcli: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise IdentityError("nmcli produced undecodable output") from exc
        return completed.stdout

    def current_identity(self) -> NetworkIdentity | None:
        args = ["nmcli", "-t", "-f", "ACTIVE,SSID,BSSID", "device", "wifi", "list"]
        if self._interface:
            args.extend(["ifname", self._interface])
        output = self._run(args)
        for line in output.splitlines():
            if not line.strip():
                continue
            fields = split_nmcli_fields(line)
            while len(fields) < 3:
                fields.append("")
            active, ssid, bssid = (field.strip() for field in fields[:3])
            if active.lower() not in {"yes", "*"}:
                continue
            logger.debug("Active Wi-Fi network %r via %s", ssid, bssid)
            return NetworkIdentity(ssid=ssid or None, bssid=bssid or None)
        return None
