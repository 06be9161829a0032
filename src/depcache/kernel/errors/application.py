"""Application-layer errors: pool lifecycle and deadlines."""

from __future__ import annotations

from typing import Any

from depcache.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting concern raised by the client itself, not the store."""

    default_code = "application_error"


class PoolError(ApplicationError):
    """The connection pool could not hand out a connection."""

    default_code = "pool_error"


class PoolExhaustedError(PoolError):
    """Every connection is borrowed and the pool is configured not to wait."""

    default_code = "pool_exhausted"

    def __init__(self, message: str = "connection pool exhausted", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class PoolClosedError(PoolError):
    """The pool was closed (or never opened)."""

    default_code = "pool_closed"

    def __init__(self, message: str = "connection pool closed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class TimeoutError(ApplicationError):  # noqa: A001
    """Operation did not finish before its deadline."""

    default_code = "timeout"


__all__ = [
    "ApplicationError",
    "PoolClosedError",
    "PoolError",
    "PoolExhaustedError",
    "TimeoutError",
]
