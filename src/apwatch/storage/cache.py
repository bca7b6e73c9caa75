"""On-disk cache of the last fetched roster."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from apwatch.models import CachedRoster, Roster

logger = logging.getLogger(__name__)


class LocalCache(Protocol):
    def save(self, roster: Roster, timestamp: datetime | None = None) -> None: ...

    def load(self) -> Roster | None: ...

    def timestamp(self) -> datetime | None: ...

    def clear(self) -> None: ...


class RosterCache:
    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, roster: Roster, timestamp: datetime | None = None) -> None:
        cached = CachedRoster(
            saved_at=timestamp or datetime.now(timezone.utc),
            roster=roster,
        )
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            json.dump(cached.model_dump(mode="json"), handle, indent=2)
        logger.debug("Cached %d access points in %s", len(roster), self._path)

    def _read(self) -> CachedRoster | None:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            return CachedRoster.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Ignoring unreadable roster cache %s: %s", self._path, exc)
            return None

    def load(self) -> Roster | None:
        cached = self._read()
        return cached.roster if cached else None

    def timestamp(self) -> datetime | None:
        cached = self._read()
        return cached.saved_at if cached else None

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
