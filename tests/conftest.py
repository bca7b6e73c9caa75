from __future__ import annotations

import asyncio
import json
import ssl
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest
from aiohttp import web
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import NameOID
from multidict import CIMultiDict

from apwatch.config import get_settings
from apwatch.core import ControllerSession
from apwatch.errors import ApWatchError, SecretNotFoundError
from apwatch.models import (
    AccessPoint,
    ControllerCredentials,
    Dialect,
    NetworkIdentity,
    Roster,
)
from apwatch.storage import save_credentials

USERNAME = "admin"
PASSWORD = "s3cret"


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("APWATCH_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_access_point(
    mac: str, *, id: str | None = None, name: str = "", model: str = "U6-Lite"
) -> AccessPoint:
    return AccessPoint(
        id=id or f"ap-{mac}",
        hardware_address=mac,
        name=name,
        model=model,
        state=1,
        adopted=True,
    )


def device_payload(
    mac: str, *, type: str = "uap", name: str | None = "Office", id: str | None = None
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "_id": id or f"dev-{mac}",
        "mac": mac,
        "model": "U6LR",
        "type": type,
        "state": 1,
        "adopted": True,
    }
    if name is not None:
        payload["name"] = name
    return payload


class MemorySecretStore:
    def __init__(self) -> None:
        self.secrets: dict[str, str] = {}

    def set(self, account: str, value: str) -> None:
        self.secrets[account] = value

    def get(self, account: str) -> str:
        try:
            return self.secrets[account]
        except KeyError:
            raise SecretNotFoundError(account) from None

    def delete(self, account: str) -> None:
        self.secrets.pop(account, None)


class FakeIdentityProvider:
    def __init__(
        self,
        identity: NetworkIdentity | None = None,
        *,
        permitted: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.identity = identity
        self.permitted = permitted
        self.error = error
        self.calls = 0

    def has_permission(self) -> bool:
        return self.permitted

    def current_identity(self) -> NetworkIdentity | None:
        self.calls += 1
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        return self.identity


class FakeSession:
    def __init__(self) -> None:
        self.authenticate_calls = 0
        self.dialect = Dialect.UNKNOWN

    async def authenticate(self, credentials: ControllerCredentials) -> Dialect:
        self.authenticate_calls += 1
        self.dialect = Dialect.UNIFI_OS
        return self.dialect


class FakeDirectory:
    """Stands in for DeviceDirectory; returns queued rosters or errors."""

    def __init__(self, *results: Roster | ApWatchError) -> None:
        self.session = FakeSession()
        self.results = list(results)
        self.fetch_calls = 0
        self.gate: asyncio.Event | None = None

    async def fetch_roster(self, credentials: ControllerCredentials) -> Roster:
        self.fetch_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, ApWatchError):
            raise result
        return result


class FakeController:
    """Minimal UniFi controller served by aiohttp."""

    def __init__(
        self,
        *,
        unifi_os: bool = True,
        legacy: bool = True,
        devices: list[dict[str, Any]] | None = None,
        device_status: int = 200,
        device_body: str | None = None,
    ) -> None:
        self.unifi_os = unifi_os
        self.legacy = legacy
        if devices is None:
            devices = [device_payload("aa:bb:cc:dd:ee:ff")]
        self.devices = devices
        self.device_status = device_status
        self.device_body = device_body
        self.expire_next = 0
        self.logins: list[tuple[str, dict[str, Any]]] = []
        self.device_requests: list[tuple[str, CIMultiDict[str]]] = []
        self._tokens = 0

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/auth/login", self._unifi_os_login)
        app.router.add_post("/api/login", self._legacy_login)
        app.router.add_get("/proxy/network/api/s/{site}/stat/device", self._devices)
        app.router.add_get("/api/s/{site}/stat/device", self._devices)
        return app

    async def _login(self, request: web.Request, enabled: bool) -> web.Response:
        payload = await request.json()
        self.logins.append((request.path, payload))
        if not enabled:
            return web.Response(status=404)
        if payload.get("username") != USERNAME or payload.get("password") != PASSWORD:
            return web.json_response({"meta": {"rc": "error"}}, status=401)
        self._tokens += 1
        response = web.json_response({"meta": {"rc": "ok"}})
        response.set_cookie("TOKEN", f"token-{self._tokens}")
        response.headers["X-CSRF-Token"] = f"csrf-{self._tokens}"
        return response

    async def _unifi_os_login(self, request: web.Request) -> web.Response:
        return await self._login(request, self.unifi_os)

    async def _legacy_login(self, request: web.Request) -> web.Response:
        return await self._login(request, self.legacy)

    async def _devices(self, request: web.Request) -> web.Response:
        self.device_requests.append((request.path, request.headers.copy()))
        if self.expire_next > 0:
            self.expire_next -= 1
            return web.Response(status=401)
        if "TOKEN" not in request.cookies:
            return web.Response(status=401)
        if self.device_body is not None:
            return web.Response(text=self.device_body, status=self.device_status)
        return web.Response(
            text=json.dumps({"meta": {"rc": "ok"}, "data": self.devices}),
            status=self.device_status,
            content_type="application/json",
        )


def credentials_for(base_url: str, password: str = PASSWORD) -> ControllerCredentials:
    return ControllerCredentials(base_url=base_url, username=USERNAME, password=password)


def self_signed_context(directory: Path) -> ssl.SSLContext:
    """Server context with a throwaway certificate no client trusts."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "unifi.local")])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    cert_path = directory / "controller.pem"
    key_path = directory / "controller.key"
    cert_path.write_bytes(certificate.public_bytes(Encoding.PEM))
    key_path.write_bytes(
        key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    )
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    context.load_cert_chain(cert_path, key_path)
    return context


def run_against(
    controller: FakeController,
    scenario: Callable[[ControllerSession, str], Awaitable[Any]],
    ssl_context: ssl.SSLContext | None = None,
) -> Any:
    """Serve ``controller`` and run ``scenario(session, base_url)`` against it."""

    async def _run() -> Any:
        runner = web.AppRunner(controller.app())
        await runner.setup()
        try:
            site = web.TCPSite(runner, "127.0.0.1", 0, ssl_context=ssl_context)
            await site.start()
            host, port = runner.addresses[0][:2]
            scheme = "https" if ssl_context is not None else "http"
            async with ControllerSession(timeout=5.0) as session:
                return await scenario(session, f"{scheme}://{host}:{port}")
        finally:
            await runner.cleanup()

    return asyncio.run(_run())


@pytest.fixture
def secret_store() -> MemorySecretStore:
    store = MemorySecretStore()
    save_credentials(store, credentials_for("https://192.168.1.1"))
    return store
