"""Kernel error hierarchy: public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   ├── ValidationError
    │   ├── NotFoundError
    │   │   └── NilReplyError
    │   └── ConflictError
    │       └── LockMismatchError
    ├── ApplicationError         (application.py)
    │   ├── PoolError
    │   │   ├── PoolExhaustedError
    │   │   └── PoolClosedError
    │   └── TimeoutError
    └── InfrastructureError      (infrastructure.py)
        ├── ConnectionError
        │   └── DialError
        ├── TimeoutError
        ├── ProtocolError
        │   ├── UnexpectedReplyError
        │   └── ScriptError
        ├── CommandError
        │   └── NoScriptError
        └── SerializationError
"""

from depcache.kernel.errors.application import (
    ApplicationError,
    PoolClosedError,
    PoolError,
    PoolExhaustedError,
    TimeoutError,
)
from depcache.kernel.errors.base import BaseError
from depcache.kernel.errors.domain import (
    ConflictError,
    DomainError,
    LockMismatchError,
    NilReplyError,
    NotFoundError,
    ValidationError,
)
from depcache.kernel.errors.infrastructure import (
    CommandError,
    ConnectionError,
    DialError,
    InfrastructureError,
    NoScriptError,
    ProtocolError,
    ScriptError,
    SerializationError,
    UnexpectedReplyError,
)
from depcache.kernel.errors.infrastructure import TimeoutError as InfrastructureTimeoutError

__all__ = [
    "ApplicationError",
    "BaseError",
    "CommandError",
    "ConflictError",
    "ConnectionError",
    "DialError",
    "DomainError",
    "InfrastructureError",
    "InfrastructureTimeoutError",
    "LockMismatchError",
    "NilReplyError",
    "NoScriptError",
    "NotFoundError",
    "PoolClosedError",
    "PoolError",
    "PoolExhaustedError",
    "ProtocolError",
    "ScriptError",
    "SerializationError",
    "TimeoutError",
    "UnexpectedReplyError",
    "ValidationError",
]
