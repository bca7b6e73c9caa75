"""Controller credentials and session models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, SecretStr, field_validator


class Dialect(str, Enum):
    """Controller API convention in effect."""

    UNKNOWN = "unknown"
    LEGACY = "legacy"
    UNIFI_OS = "unifi_os"


class ControllerCredentials(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    base_url: str
    username: str
    password: SecretStr

    @field_validator("base_url", "username")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("password")
    @classmethod
    def _password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("must not be empty")
        return value


class SessionState(BaseModel):
    dialect: Dialect = Dialect.UNKNOWN
    authenticated: bool = False
    csrf_token: str | None = None
