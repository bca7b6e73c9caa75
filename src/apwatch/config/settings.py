from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, default_data_dir, expand_path

CONFIG_ENV_VAR = "APWATCH_CONFIG"


class StorageConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class ControllerConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    site: str = Field(default="default", min_length=1)
    timeout: float = Field(default=10.0, gt=0)


class MonitorConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    interval: float = Field(default=30.0, gt=0)
    use_cache: bool = True


class WifiConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    interface: str | None = None
    timeout: float = Field(default=5.0, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage: StorageConfig = Field(default_factory=StorageConfig)
    controller: ControllerConfig = Field(default_factory=ControllerConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    wifi: WifiConfig = Field(default_factory=WifiConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.storage.path)


# Optional keys are written commented out with an example value.
_EXAMPLES = {("wifi", "interface"): "wlan0"}


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(str(value))


def render_settings_toml(settings: Settings) -> str:
    lines = ["# apwatch configuration"]
    for section, values in settings.model_dump().items():
        lines.extend(["", f"[{section}]"])
        for key, value in values.items():
            if value is None:
                example = _EXAMPLES.get((section, key), "")
                lines.append(f"# {key} = {_toml_value(example)}")
            else:
                lines.append(f"{key} = {_toml_value(value)}")
    lines.append("")
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
