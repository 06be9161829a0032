"""Infrastructure errors: transport, protocol and server error replies."""

from __future__ import annotations

from typing import Any

from depcache.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Failure talking to the store that is not a business outcome."""

    default_code = "infrastructure_error"


class ConnectionError(InfrastructureError):  # noqa: A001
    """Read, write or connect failure; the connection is discarded."""

    default_code = "connection_error"

    def __init__(
        self,
        resource: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Could not connect to '{resource}'", **kwargs)
        self.resource = resource


class DialError(ConnectionError):
    """Connect, AUTH or SELECT failed while opening a new connection."""

    default_code = "dial_error"


class TimeoutError(InfrastructureError):  # noqa: A001
    """A socket operation exceeded its timeout."""

    default_code = "infrastructure_timeout"


class ProtocolError(InfrastructureError):
    """The store replied with something the client cannot interpret."""

    default_code = "protocol_error"


class UnexpectedReplyError(ProtocolError):
    """A reply had a different shape than the command guarantees."""

    default_code = "unexpected_reply"

    def __init__(self, expected: str, reply: object, **kwargs: Any) -> None:
        super().__init__(
            f"unexpected reply type {type(reply).__name__}, expected {expected}",
            **kwargs,
        )
        self.expected = expected
        self.reply = reply


class ScriptError(ProtocolError):
    """A server-side script stayed unknown after being re-loaded."""

    default_code = "script_error"

    def __init__(self, name: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message or f"script '{name}' is not known to the server", **kwargs)
        self.name = name


class CommandError(InfrastructureError):
    """The store answered with an error reply (``-ERR``, ``-WRONGTYPE``, ...)."""

    default_code = "command_error"


class NoScriptError(CommandError):
    """``EVALSHA`` referenced a digest the store does not know."""

    default_code = "no_script"


class SerializationError(InfrastructureError):
    """Failed to serialize or deserialize a cached payload."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


__all__ = [
    "CommandError",
    "ConnectionError",
    "DialError",
    "InfrastructureError",
    "NoScriptError",
    "ProtocolError",
    "ScriptError",
    "SerializationError",
    "TimeoutError",
    "UnexpectedReplyError",
]
