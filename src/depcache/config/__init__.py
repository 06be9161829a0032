"""Config – settings, loaders, URL parsing and validation errors."""

from depcache.config.settings import EnvSettingsLoader, RedisCacheSettings, Settings, SettingsLoader
from depcache.config.url import RedisURL
from depcache.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    InvalidURLError,
    MissingRedisURLError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "InvalidURLError",
    "MissingRedisURLError",
    "MissingRequiredSettingError",
    "RedisCacheSettings",
    "RedisURL",
    "Settings",
    "SettingsLoader",
]
