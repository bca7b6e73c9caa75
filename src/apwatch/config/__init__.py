from __future__ import annotations

from .paths import (
    APP_NAME,
    CACHE_FILENAME,
    CONFIG_FILENAME,
    SECRETS_FILENAME,
    default_config_path,
    default_data_dir,
    expand_path,
)
from .settings import (
    CONFIG_ENV_VAR,
    ControllerConfig,
    MonitorConfig,
    Settings,
    StorageConfig,
    WifiConfig,
    data_dir_from_settings,
    get_settings,
    load_settings,
    render_settings_toml,
    resolve_config_path,
    write_settings,
)

__all__ = [
    "APP_NAME",
    "CACHE_FILENAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "ControllerConfig",
    "MonitorConfig",
    "SECRETS_FILENAME",
    "Settings",
    "StorageConfig",
    "WifiConfig",
    "data_dir_from_settings",
    "default_config_path",
    "default_data_dir",
    "expand_path",
    "get_settings",
    "load_settings",
    "render_settings_toml",
    "resolve_config_path",
    "write_settings",
]
