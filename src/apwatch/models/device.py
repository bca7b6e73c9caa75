"""Access point models."""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime

from pydantic import BaseModel, Field, RootModel, model_validator

ONLINE_STATE = 1

_SEPARATORS = re.compile(r"[\s:.\-]")


def normalize_address(value: str) -> str:
    """Strip separators and lowercase a hardware address."""
    return _SEPARATORS.sub("", value or "").lower()


class AccessPoint(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    id: str
    hardware_address: str
    name: str = ""
    model: str
    state: int
    adopted: bool

    @property
    def normalized_address(self) -> str:
        return normalize_address(self.hardware_address)

    @property
    def display_name(self) -> str:
        return self.name or self.model

    @property
    def is_online(self) -> bool:
        return self.state == ONLINE_STATE


class Roster(RootModel[list[AccessPoint]]):
    """Ordered set of access points, unique by id."""

    model_config = {"frozen": True}

    root: list[AccessPoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> Roster:
        seen: set[str] = set()
        for access_point in self.root:
            if access_point.id in seen:
                raise ValueError(f"Duplicate access point id: {access_point.id}")
            seen.add(access_point.id)
        return self

    def __iter__(self) -> Iterator[AccessPoint]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> AccessPoint:
        return self.root[index]

    def get(self, access_point_id: str) -> AccessPoint | None:
        for access_point in self.root:
            if access_point.id == access_point_id:
                return access_point
        return None


class CachedRoster(BaseModel):
    """Roster persisted by the local cache."""

    model_config = {"extra": "forbid"}

    saved_at: datetime
    roster: Roster
