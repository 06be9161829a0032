"""Config validation errors."""
from depcache.config.validation.errors import (
    ConfigError,
    InvalidSettingValueError,
    InvalidURLError,
    MissingRedisURLError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "InvalidSettingValueError",
    "InvalidURLError",
    "MissingRedisURLError",
    "MissingRequiredSettingError",
]
