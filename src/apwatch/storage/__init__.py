from __future__ import annotations

from .cache import LocalCache, RosterCache
from .secrets import (
    ACCOUNT_PASSWORD,
    ACCOUNT_URL,
    ACCOUNT_USERNAME,
    CREDENTIAL_ACCOUNTS,
    FileSecretStore,
    SecretStore,
    build_credentials,
    credential_presence,
    delete_credentials,
    load_credentials,
    save_credentials,
)

__all__ = [
    "ACCOUNT_PASSWORD",
    "ACCOUNT_URL",
    "ACCOUNT_USERNAME",
    "CREDENTIAL_ACCOUNTS",
    "FileSecretStore",
    "LocalCache",
    "RosterCache",
    "SecretStore",
    "build_credentials",
    "credential_presence",
    "delete_credentials",
    "load_credentials",
    "save_credentials",
]
