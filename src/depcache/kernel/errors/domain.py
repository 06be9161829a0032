"""Domain errors: outcomes the caller is expected to branch on."""

from __future__ import annotations

from typing import Any

from depcache.kernel.errors.base import BaseError


class DomainError(BaseError):
    """A request was well-formed but the store state does not allow it."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """Arguments were rejected before any command reached the store."""

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.field = field


class NotFoundError(DomainError):
    """The requested resource does not exist."""

    default_code = "not_found"


class NilReplyError(NotFoundError):
    """The store answered a read with a nil reply (missing key or field)."""

    default_code = "nil_reply"

    def __init__(self, message: str = "nil returned", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ConflictError(DomainError):
    """The operation conflicts with state owned by someone else."""

    default_code = "conflict"


class LockMismatchError(ConflictError):
    """The lock key is held with a different secret."""

    default_code = "lock_mismatch"

    def __init__(self, name: str | None = None, **kwargs: Any) -> None:
        super().__init__("key is locked with a different secret", **kwargs)
        self.name = name


__all__ = [
    "ConflictError",
    "DomainError",
    "LockMismatchError",
    "NilReplyError",
    "NotFoundError",
    "ValidationError",
]
