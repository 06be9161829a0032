"""Config validation errors."""
from depcache.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Raised when configuration is invalid or loading failed."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A required environment variable / setting is absent."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str, message: str | None = None) -> None:
        super().__init__(message or f"Required setting '{setting_name}' is missing")
        self.setting_name = setting_name


class MissingRedisURLError(MissingRequiredSettingError):
    """``connect`` was called without a destination URL."""
    default_code = "missing_redis_url"

    def __init__(self) -> None:
        super().__init__("redisURL", "missing required parameter: redisURL")


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but semantically invalid."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            f"Setting '{setting_name}' has invalid value {value!r}: {reason}"
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


class InvalidURLError(ConfigError):
    """The destination URL cannot be parsed into host, port and database."""
    default_code = "invalid_url"

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"invalid redis URL: {reason}")
        self.url = url
        self.reason = reason


__all__ = [
    "ConfigError",
    "InvalidSettingValueError",
    "InvalidURLError",
    "MissingRedisURLError",
    "MissingRequiredSettingError",
]
