"""Named secret storage for controller credentials."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from apwatch.errors import InvalidInputError, SecretNotFoundError
from apwatch.models import ControllerCredentials

logger = logging.getLogger(__name__)

ACCOUNT_URL = "controller.url"
ACCOUNT_USERNAME = "controller.username"
ACCOUNT_PASSWORD = "controller.password"
CREDENTIAL_ACCOUNTS = (ACCOUNT_URL, ACCOUNT_USERNAME, ACCOUNT_PASSWORD)


class SecretStore(Protocol):
    def set(self, account: str, value: str) -> None: ...

    def get(self, account: str) -> str: ...

    def delete(self, account: str) -> None: ...


class FileSecretStore:
    """Keep secrets in a JSON file readable only by the current user."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load_locked(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unable to read secrets file %s: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {
            key: value
            for key, value in payload.items()
            if isinstance(key, str) and isinstance(value, str)
        }

    def _save_locked(self, secrets: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(secrets, handle, indent=2)
        os.chmod(self._path, 0o600)

    def set(self, account: str, value: str) -> None:
        with self._lock:
            secrets = self._load_locked()
            secrets[account] = value
            self._save_locked(secrets)

    def get(self, account: str) -> str:
        with self._lock:
            secrets = self._load_locked()
        try:
            return secrets[account]
        except KeyError:
            raise SecretNotFoundError(account) from None

    def delete(self, account: str) -> None:
        with self._lock:
            secrets = self._load_locked()
            if secrets.pop(account, None) is not None:
                self._save_locked(secrets)


def save_credentials(store: SecretStore, credentials: ControllerCredentials) -> None:
    store.set(ACCOUNT_URL, credentials.base_url)
    store.set(ACCOUNT_USERNAME, credentials.username)
    store.set(ACCOUNT_PASSWORD, credentials.password.get_secret_value())


def build_credentials(base_url: str, username: str, password: str) -> ControllerCredentials:
    try:
        return ControllerCredentials(
            base_url=base_url, username=username, password=password
        )
    except ValidationError as exc:
        fields = ", ".join(str(error["loc"][0]) for error in exc.errors())
        raise InvalidInputError(f"Missing or empty credential fields: {fields}") from exc


def credential_presence(store: SecretStore) -> dict[str, bool]:
    presence: dict[str, bool] = {}
    for account in CREDENTIAL_ACCOUNTS:
        try:
            presence[account] = bool(store.get(account))
        except SecretNotFoundError:
            presence[account] = False
    return presence


def load_credentials(store: SecretStore) -> ControllerCredentials | None:
    """Return stored credentials, or None unless all three entries exist."""
    values: list[str] = []
    for account in CREDENTIAL_ACCOUNTS:
        try:
            values.append(store.get(account))
        except SecretNotFoundError:
            return None
    try:
        return build_credentials(*values)
    except InvalidInputError:
        logger.warning("Stored controller credentials are incomplete")
        return None


def delete_credentials(store: SecretStore) -> None:
    for account in CREDENTIAL_ACCOUNTS:
        store.delete(account)
