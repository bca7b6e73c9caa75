"""Tests for controller login and dialect negotiation."""

from __future__ import annotations

import asyncio

import pytest
from aiohttp import ClientSession
from conftest import (
    FakeController,
    credentials_for,
    run_against,
    self_signed_context,
)

from apwatch.core import ControllerSession, DeviceDirectory
from apwatch.errors import (
    AuthenticationError,
    InvalidInputError,
    SessionExpiredError,
    TransportError,
)
from apwatch.models import Dialect


def test_unifi_os_login_is_tried_first():
    controller = FakeController()

    async def scenario(session: ControllerSession, base_url: str):
        dialect = await session.authenticate(credentials_for(base_url))
        return dialect, session.state

    dialect, state = run_against(controller, scenario)

    assert dialect is Dialect.UNIFI_OS
    assert state.authenticated
    assert state.csrf_token == "csrf-1"
    assert controller.logins == [
        (
            "/api/auth/login",
            {"username": "admin", "password": "s3cret", "remember": False},
        )
    ]


def test_falls_back_to_legacy_login():
    controller = FakeController(unifi_os=False)

    async def scenario(session: ControllerSession, base_url: str):
        dialect = await session.authenticate(credentials_for(base_url))
        directory = DeviceDirectory(session)
        roster = await directory.fetch_roster(credentials_for(base_url))
        return dialect, directory.device_path(), roster

    dialect, path, roster = run_against(controller, scenario)

    assert dialect is Dialect.LEGACY
    assert path == "api/s/default/stat/device"
    assert [login[0] for login in controller.logins] == ["/api/auth/login", "/api/login"]
    assert controller.logins[1][1] == {"username": "admin", "password": "s3cret"}
    assert controller.device_requests[0][0] == "/api/s/default/stat/device"
    assert len(roster) == 1


def test_both_dialects_rejected():
    controller = FakeController()

    async def scenario(session: ControllerSession, base_url: str):
        with pytest.raises(AuthenticationError):
            await session.authenticate(credentials_for(base_url, password="wrong"))
        return session.is_authenticated, session.dialect

    authenticated, dialect = run_against(controller, scenario)

    assert not authenticated
    assert dialect is Dialect.UNKNOWN
    assert len(controller.logins) == 2


@pytest.mark.parametrize(
    "base_url", ["not a url", "ftp://192.168.1.1", "https://", "192.168.1.1"]
)
def test_invalid_url_rejected_before_any_request(base_url):
    session = ControllerSession()

    with pytest.raises(InvalidInputError):
        asyncio.run(session.authenticate(credentials_for(base_url)))

    assert not session.is_authenticated
    assert session.base_url is None


def test_unreachable_controller_is_a_transport_error():
    async def scenario():
        async with ControllerSession(timeout=2.0) as session:
            await session.authenticate(credentials_for("http://127.0.0.1:1"))

    with pytest.raises(TransportError):
        asyncio.run(scenario())


def test_csrf_token_is_sent_with_requests():
    controller = FakeController()

    async def scenario(session: ControllerSession, base_url: str):
        await session.authenticate(credentials_for(base_url))
        return await session.get("proxy/network/api/s/default/stat/device")

    response = run_against(controller, scenario)

    assert response.status == 200
    path, headers = controller.device_requests[0]
    assert path == "/proxy/network/api/s/default/stat/device"
    assert headers["X-CSRF-Token"] == "csrf-1"


def test_rejected_request_invalidates_session():
    controller = FakeController()
    controller.expire_next = 1

    async def scenario(session: ControllerSession, base_url: str):
        await session.authenticate(credentials_for(base_url))
        with pytest.raises(SessionExpiredError):
            await session.get("proxy/network/api/s/default/stat/device")
        return session.is_authenticated, session.dialect

    authenticated, dialect = run_against(controller, scenario)

    assert not authenticated
    assert dialect is Dialect.UNIFI_OS


def test_trailing_slash_in_base_url_is_accepted():
    controller = FakeController()

    async def scenario(session: ControllerSession, base_url: str):
        await session.authenticate(credentials_for(f"{base_url}/"))
        return session.base_url

    base_url = run_against(controller, scenario)

    assert base_url is not None
    assert base_url.host == "127.0.0.1"


def test_self_signed_certificate_is_accepted(tmp_path):
    controller = FakeController()

    async def scenario(session: ControllerSession, base_url: str):
        dialect = await session.authenticate(credentials_for(base_url))
        response = await session.get("proxy/network/api/s/default/stat/device")
        return base_url, dialect, response.status

    base_url, dialect, status = run_against(
        controller, scenario, ssl_context=self_signed_context(tmp_path)
    )

    assert base_url.startswith("https://")
    assert dialect is Dialect.UNIFI_OS
    assert status == 200


def test_verifying_client_rejects_the_test_certificate(tmp_path):
    controller = FakeController()

    async def scenario(session: ControllerSession, base_url: str):
        async with ClientSession() as http:
            strict = ControllerSession(http, timeout=5.0)
            with pytest.raises(TransportError):
                await strict.authenticate(credentials_for(base_url))

    run_against(controller, scenario, ssl_context=self_signed_context(tmp_path))

    assert controller.logins == []
