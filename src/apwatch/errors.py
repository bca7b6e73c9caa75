"""Exceptions raised by apwatch."""

from __future__ import annotations


class ApWatchError(Exception):
    pass


class InvalidInputError(ApWatchError):
    pass  # malformed controller URL or address


class AuthenticationError(ApWatchError):
    pass  # every login dialect rejected, or session rejected after re-login


class SessionExpiredError(ApWatchError):
    pass  # 401 / 403 on an authenticated call


class TransportError(ApWatchError):
    pass  # timeouts, connection issues


class ResponseFormatError(ApWatchError):
    pass  # unexpected status or payload shape


class EmptyResultError(ApWatchError):
    pass  # well-formed response without access points


class PermissionDeniedError(ApWatchError):
    pass


class ConfigurationMissingError(ApWatchError):
    pass


class IdentityError(ApWatchError):
    pass  # reading the current Wi-Fi association failed


class SecretNotFoundError(ApWatchError, KeyError):
    def __init__(self, account: str) -> None:
        super().__init__(account)
        self.account = account

    def __str__(self) -> str:
        return f"No secret stored for '{self.account}'"
