"""Kernel – error hierarchy and clocks shared by every layer."""

from depcache.kernel.errors import (
    ApplicationError,
    BaseError,
    ConflictError,
    DomainError,
    InfrastructureError,
    LockMismatchError,
    NilReplyError,
    NotFoundError,
    TimeoutError,
    ValidationError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "LockMismatchError",
    "NilReplyError",
    "NotFoundError",
    "TimeoutError",
    "ValidationError",
]
