from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from apwatch.errors import (
    AuthenticationError,
    EmptyResultError,
    ResponseFormatError,
    SessionExpiredError,
)
from apwatch.models import AccessPoint, ControllerCredentials, Dialect, Roster

from .session import ControllerSession

logger = logging.getLogger(__name__)

ACCESS_POINT_TYPE = "uap"


class DeviceListResponse(BaseModel):
    data: list[dict[str, Any]]


class ControllerDevice(BaseModel):
    """Access point entry of ``stat/device``."""

    id: str
    mac: str
    name: str | None = None
    model: str
    type: str
    state: int
    adopted: bool

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ControllerDevice:
        return cls.model_validate({**payload, "id": payload.get("_id")})

    def to_access_point(self) -> AccessPoint:
        return AccessPoint(
            id=self.id,
            hardware_address=self.mac,
            name=self.name or "",
            model=self.model,
            state=self.state,
            adopted=self.adopted,
        )


def parse_roster(text: str) -> Roster:
    """Map a ``stat/device`` body to a roster of access points only."""
    try:
        response = DeviceListResponse.model_validate_json(text)
        devices = [
            ControllerDevice.from_payload(entry)
            for entry in response.data
            if entry.get("type") == ACCESS_POINT_TYPE
        ]
    except ValidationError as exc:
        raise ResponseFormatError(f"Failed to parse response: {exc}") from exc

    access_points: dict[str, AccessPoint] = {}
    for device in devices:
        access_points.setdefault(device.id, device.to_access_point())

    if not access_points:
        raise EmptyResultError("No access points found")
    return Roster(list(access_points.values()))


class DeviceDirectory:
    def __init__(self, session: ControllerSession, site: str = "default") -> None:
        self._session = session
        self._site = site

    @property
    def session(self) -> ControllerSession:
        return self._session

    def device_path(self) -> str:
        if self._session.dialect is Dialect.LEGACY:
            return f"api/s/{self._site}/stat/device"
        return f"proxy/network/api/s/{self._site}/stat/device"

    async def fetch_roster(self, credentials: ControllerCredentials) -> Roster:
        try:
            response = await self._session.get(self.device_path())
        except SessionExpiredError:
            logger.info("Controller session expired; logging in again")
            await self._session.authenticate(credentials)
            try:
                response = await self._session.get(self.device_path())
            except SessionExpiredError as exc:
                raise AuthenticationError(
                    "Controller rejected the session after logging in again"
                ) from exc

        if response.status != 200:
            raise ResponseFormatError(
                f"Invalid response from controller (HTTP {response.status})"
            )

        roster = parse_roster(response.text)
        logger.debug("Fetched %d access points", len(roster))
        return roster

    async def test_connection(self, credentials: ControllerCredentials) -> Roster:
        await self._session.authenticate(credentials)
        return await self.fetch_roster(credentials)
