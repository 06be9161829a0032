"""Config settings – RedisCacheSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from depcache.config.settings.base import Settings
from depcache.config.validation import InvalidSettingValueError, MissingRedisURLError


@dataclasses.dataclass
class RedisCacheSettings(Settings):
    """Pool and dial configuration for :class:`~depcache.adapters.redis.RedisCache`.

    Durations are in seconds. Zero means "unlimited" for the pool sizes and
    "disabled" for ``max_conn_lifetime`` and ``idle_timeout``.
    """

    _prefix: ClassVar[str] = "REDIS"

    url: str
    max_active_connections: int = 0
    max_idle_connections: int = 10
    max_conn_lifetime: float = 0.0
    idle_timeout: float = 240.0
    dependency_mode: bool = True
    wait: bool = True
    connect_timeout: float = 5.0
    read_timeout: float = 0.0

    def _validate(self) -> None:
        if not self.url:
            raise MissingRedisURLError()
        for name in (
            "max_active_connections",
            "max_idle_connections",
            "max_conn_lifetime",
            "idle_timeout",
            "connect_timeout",
            "read_timeout",
        ):
            value = getattr(self, name)
            if value < 0:
                raise InvalidSettingValueError(name, value, "must not be negative")


__all__ = ["RedisCacheSettings"]
