"""Periodic reconciliation of the Wi-Fi association against the roster."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from apwatch.errors import (
    ApWatchError,
    ConfigurationMissingError,
    PermissionDeniedError,
)
from apwatch.models import (
    AccessPoint,
    ConnectionState,
    ControllerCredentials,
    MonitorSnapshot,
    NetworkIdentity,
    Roster,
)
from apwatch.storage import LocalCache, SecretStore, load_credentials
from apwatch.wifi import NetworkIdentityProvider

from .directory import DeviceDirectory
from .matcher import match_access_point

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0
PERMISSION_MESSAGE = "Permission required to read the current Wi-Fi network"
NO_CREDENTIALS_MESSAGE = "No controller credentials configured"

SnapshotListener = Callable[[MonitorSnapshot], None]


def derive_state(
    *,
    identity_readable: bool,
    identity: NetworkIdentity | None,
    has_credentials: bool,
    roster: Roster | None,
    match: AccessPoint | None,
) -> ConnectionState:
    if not identity_readable:
        return ConnectionState.ERROR
    if identity is None or not identity.bssid:
        return ConnectionState.DISCONNECTED
    if not has_credentials or roster is None:
        return ConnectionState.ERROR
    if match is not None:
        return ConnectionState.CONNECTED
    return ConnectionState.AWAY


class AccessPointMonitor:
    """Run one cycle at a time and publish the derived state.

    The controller session, the held roster and the snapshot belong to the
    monitor. Callers read :attr:`snapshot` or register a listener; a cycle
    triggered while another one is running is dropped.
    """

    def __init__(
        self,
        directory: DeviceDirectory,
        identity_provider: NetworkIdentityProvider,
        secret_store: SecretStore,
        cache: LocalCache | None = None,
        *,
        interval: float = DEFAULT_INTERVAL,
        use_cache: bool = True,
    ) -> None:
        self._directory = directory
        self._identity_provider = identity_provider
        self._secret_store = secret_store
        self._cache = cache
        self._interval = interval
        self._seed_from_cache = use_cache and cache is not None
        self._roster: Roster | None = None
        self._busy = False
        self._fetch_attempted = False
        self._snapshot = MonitorSnapshot()
        self._listeners: list[SnapshotListener] = []
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None

    @property
    def snapshot(self) -> MonitorSnapshot:
        return self._snapshot

    @property
    def roster(self) -> Roster | None:
        return self._roster

    @property
    def is_refreshing(self) -> bool:
        return self._busy

    @property
    def interval(self) -> float:
        return self._interval

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def _publish(self, snapshot: MonitorSnapshot) -> MonitorSnapshot:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")
        return snapshot

    async def _fetch(self, credentials: ControllerCredentials) -> Roster:
        self._fetch_attempted = True
        await self._directory.session.authenticate(credentials)
        roster = await self._directory.fetch_roster(credentials)
        if self._cache is not None:
            try:
                self._cache.save(roster)
            except OSError as exc:
                logger.warning("Unable to cache access points: %s", exc)
        return roster

    async def _ensure_roster(self, credentials: ControllerCredentials) -> Roster:
        if self._roster is None and self._seed_from_cache and self._cache is not None:
            # Only the first cycle may start from the on-disk copy.
            self._seed_from_cache = False
            self._roster = self._cache.load()
            if self._roster is not None:
                logger.debug("Using %d cached access points", len(self._roster))
        if self._roster is None:
            self._roster = await self._fetch(credentials)
        return self._roster

    async def _cycle(self) -> MonitorSnapshot:
        identity: NetworkIdentity | None = None
        roster: Roster | None = None
        match: AccessPoint | None = None
        has_credentials = False
        error: str | None = None

        identity_readable = self._identity_provider.has_permission()
        if not identity_readable:
            error = PERMISSION_MESSAGE
        else:
            try:
                identity = self._identity_provider.current_identity()
            except PermissionDeniedError as exc:
                logger.warning("Not allowed to read Wi-Fi identity: %s", exc)
                identity_readable = False
                error = PERMISSION_MESSAGE
            except ApWatchError as exc:
                logger.warning("Unable to read Wi-Fi identity: %s", exc)
                identity_readable = False
                error = str(exc)
            except Exception as exc:
                logger.exception("Wi-Fi identity provider failed")
                identity_readable = False
                error = f"Unable to read Wi-Fi identity: {exc}"

        if identity is not None and identity.bssid:
            credentials = load_credentials(self._secret_store)
            has_credentials = credentials is not None
            if credentials is None:
                error = NO_CREDENTIALS_MESSAGE
            else:
                try:
                    roster = await self._ensure_roster(credentials)
                except ApWatchError as exc:
                    logger.warning("Unable to fetch access points: %s", exc)
                    error = str(exc)
            if roster is not None:
                match = match_access_point(identity.bssid, roster)
                if match is None:
                    logger.debug("BSSID %s is not a known access point", identity.bssid)

        state = derive_state(
            identity_readable=identity_readable,
            identity=identity,
            has_credentials=has_credentials,
            roster=roster,
            match=match,
        )
        snapshot = MonitorSnapshot(
            state=state,
            ssid=identity.ssid if identity else None,
            bssid=identity.bssid if identity else None,
            access_point=match,
            error=error,
            last_updated=datetime.now(timezone.utc),
            updated_at=time.monotonic(),
        )
        return self._publish(snapshot)

    async def refresh(self) -> MonitorSnapshot | None:
        """Run one cycle; returns None when a cycle is already running."""
        if self._busy:
            logger.debug("Refresh already in progress; skipping")
            return None
        self._busy = True
        try:
            return await self._cycle()
        finally:
            self._busy = False

    async def force_refresh(self) -> MonitorSnapshot | None:
        """Run a cycle against a freshly fetched roster.

        The previous roster is kept only when this cycle tried to fetch and
        failed. A cycle that never reached the controller leaves no roster,
        so the next cycle fetches.
        """
        if self._busy:
            return None
        previous, self._roster = self._roster, None
        self._seed_from_cache = False
        self._fetch_attempted = False
        snapshot = await self.refresh()
        if self._roster is None and self._fetch_attempted:
            self._roster = previous
        return snapshot

    async def update_cache(self) -> Roster:
        if self._busy:
            raise ApWatchError("A refresh is already in progress")
        credentials = load_credentials(self._secret_store)
        if credentials is None:
            raise ConfigurationMissingError(NO_CREDENTIALS_MESSAGE)
        self._busy = True
        try:
            self._roster = await self._fetch(credentials)
        finally:
            self._busy = False
        return self._roster

    def cache_info(self) -> tuple[int, datetime | None]:
        if self._cache is None:
            return 0, None
        roster = self._cache.load()
        return (len(roster) if roster else 0), self._cache.timestamp()

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        stop = stop_event or self._stop_event or asyncio.Event()
        self._stop_event = stop
        while not stop.is_set():
            try:
                await self.refresh()
            except Exception:
                logger.exception("Unexpected error during refresh")
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=self._interval)

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._stop_event = asyncio.Event()
            self._task = asyncio.create_task(self.run(self._stop_event))
        return self._task

    async def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
