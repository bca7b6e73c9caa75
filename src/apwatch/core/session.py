"""Controller login and authenticated requests.

UniFi controllers speak one of two dialects. UniFi OS consoles (UDM, Cloud
Key Gen2+) log in at ``/api/auth/login`` and proxy the network application
under ``/proxy/network``. Standalone controllers log in at ``/api/login``.
The dialect is learned by trying UniFi OS first and falling back to the
legacy endpoint.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from aiohttp import ClientError, ClientSession, ClientTimeout, CookieJar, TCPConnector
from yarl import URL

from apwatch.errors import (
    AuthenticationError,
    InvalidInputError,
    SessionExpiredError,
    TransportError,
)
from apwatch.models import ControllerCredentials, Dialect, SessionState

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-CSRF-Token"
EXPIRED_STATUSES = frozenset({401, 403})


@dataclass(frozen=True, slots=True)
class AuthStrategy:
    dialect: Dialect
    login_path: str
    build_payload: Callable[[str, str], dict[str, Any]]


@dataclass(frozen=True, slots=True)
class AuthAttempt:
    dialect: Dialect
    ok: bool
    status: int | None = None
    detail: str = ""
    transport_failure: bool = False


@dataclass(frozen=True, slots=True)
class ControllerResponse:
    status: int
    text: str


AUTH_STRATEGIES: tuple[AuthStrategy, ...] = (
    AuthStrategy(
        Dialect.UNIFI_OS,
        "api/auth/login",
        lambda username, password: {
            "username": username,
            "password": password,
            "remember": False,
        },
    ),
    AuthStrategy(
        Dialect.LEGACY,
        "api/login",
        lambda username, password: {"username": username, "password": password},
    ),
)


def parse_base_url(value: str) -> URL:
    try:
        url = URL(value.strip())
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid controller URL: {value!r}") from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise InvalidInputError(f"Invalid controller URL: {value!r}")
    return url


def join_url(base: URL, path: str) -> URL:
    return URL(f"{str(base).rstrip('/')}/{path.lstrip('/')}")


class ControllerSession:
    """Owns the controller cookie jar, CSRF token and negotiated dialect."""

    def __init__(
        self,
        http: ClientSession | None = None,
        *,
        timeout: float = 10.0,
        strategies: tuple[AuthStrategy, ...] = AUTH_STRATEGIES,
    ) -> None:
        self._http = http
        self._owns_http = http is None
        self._timeout = ClientTimeout(total=timeout)
        self._strategies = strategies
        self._state = SessionState()
        self._base_url: URL | None = None

    async def __aenter__(self) -> ControllerSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

    def _client(self) -> ClientSession:
        if self._http is None:
            # Controllers are LAN appliances with self-signed certificates,
            # usually addressed by IP.
            self._http = ClientSession(
                connector=TCPConnector(ssl=False),
                cookie_jar=CookieJar(unsafe=True),
            )
        return self._http

    @property
    def dialect(self) -> Dialect:
        return self._state.dialect

    @property
    def is_authenticated(self) -> bool:
        return self._state.authenticated

    @property
    def base_url(self) -> URL | None:
        return self._base_url

    @property
    def state(self) -> SessionState:
        return self._state.model_copy()

    def invalidate(self) -> None:
        self._state = self._state.model_copy(update={"authenticated": False})

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._state.csrf_token:
            headers[CSRF_HEADER] = self._state.csrf_token
        return headers

    async def _attempt(
        self, base: URL, strategy: AuthStrategy, credentials: ControllerCredentials
    ) -> tuple[AuthAttempt, str | None]:
        url = join_url(base, strategy.login_path)
        payload = strategy.build_payload(
            credentials.username, credentials.password.get_secret_value()
        )
        try:
            async with self._client().post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            ) as resp:
                await resp.read()
                csrf_token = resp.headers.get(CSRF_HEADER)
                if resp.status == 200:
                    return AuthAttempt(strategy.dialect, True, resp.status), csrf_token
                return (
                    AuthAttempt(
                        strategy.dialect,
                        False,
                        resp.status,
                        f"login returned HTTP {resp.status}",
                    ),
                    None,
                )
        except asyncio.TimeoutError:
            return (
                AuthAttempt(
                    strategy.dialect, False, detail="login timeout", transport_failure=True
                ),
                None,
            )
        except ClientError as exc:
            return (
                AuthAttempt(
                    strategy.dialect,
                    False,
                    detail=f"login connection error: {exc}",
                    transport_failure=True,
                ),
                None,
            )

    async def authenticate(self, credentials: ControllerCredentials) -> Dialect:
        base = parse_base_url(credentials.base_url)

        self._client().cookie_jar.clear()
        self._state = SessionState()
        self._base_url = base

        attempts: list[AuthAttempt] = []
        for strategy in self._strategies:
            attempt, csrf_token = await self._attempt(base, strategy, credentials)
            attempts.append(attempt)
            if attempt.ok:
                self._state = SessionState(
                    dialect=attempt.dialect,
                    authenticated=True,
                    csrf_token=csrf_token,
                )
                logger.info("Logged in to %s (%s)", base.host, attempt.dialect.value)
                return attempt.dialect
            logger.debug("%s login failed: %s", attempt.dialect.value, attempt.detail)

        summary = "; ".join(f"{a.dialect.value}: {a.detail}" for a in attempts)
        if attempts and all(a.transport_failure for a in attempts):
            raise TransportError(f"Unable to reach controller ({summary})")
        raise AuthenticationError(
            "Authentication failed. Please check your credentials."
            + (f" ({summary})" if summary else "")
        )

    async def get(self, path: str) -> ControllerResponse:
        if self._base_url is None:
            raise SessionExpiredError("Not logged in to a controller")
        url = join_url(self._base_url, path)
        try:
            async with self._client().get(
                url, headers=self._headers(), timeout=self._timeout
            ) as resp:
                text = await resp.text()
                status = resp.status
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Request to {url.path} timed out") from exc
        except ClientError as exc:
            raise TransportError(f"Request to {url.path} failed: {exc}") from exc

        if status in EXPIRED_STATUSES:
            self.invalidate()
            raise SessionExpiredError(f"Controller rejected session (HTTP {status})")
        return ControllerResponse(status, text)
