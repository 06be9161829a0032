"""Redis adapter – typed conversion of raw replies.

Each helper accepts the raw value returned by
:meth:`~depcache.adapters.redis.connection.RedisConnection.do`. A nil reply
raises :class:`~depcache.kernel.errors.NilReplyError`; a reply whose type the
command never produces raises :class:`~depcache.kernel.errors.UnexpectedReplyError`.
"""
from __future__ import annotations

from typing import Any

from depcache.kernel.errors import NilReplyError, UnexpectedReplyError

_TRUE = frozenset({b"1", b"t", b"T", b"true", b"TRUE", b"True"})
_FALSE = frozenset({b"0", b"f", b"F", b"false", b"FALSE", b"False"})


def to_int(reply: Any) -> int:
    if reply is None:
        raise NilReplyError()
    if isinstance(reply, bool):
        return int(reply)
    if isinstance(reply, int):
        return reply
    if isinstance(reply, (bytes, str)):
        try:
            return int(reply)
        except ValueError as exc:
            raise UnexpectedReplyError("integer", reply, cause=exc) from exc
    raise UnexpectedReplyError("integer", reply)


def to_bytes(reply: Any) -> bytes:
    if reply is None:
        raise NilReplyError()
    if isinstance(reply, bytes):
        return reply
    if isinstance(reply, str):
        return reply.encode()
    raise UnexpectedReplyError("bulk string", reply)


def to_str(reply: Any) -> str:
    if reply is None:
        raise NilReplyError()
    if isinstance(reply, str):
        return reply
    if isinstance(reply, bytes):
        return reply.decode("utf-8", errors="replace")
    raise UnexpectedReplyError("bulk string", reply)


def to_bool(reply: Any) -> bool:
    if reply is None:
        raise NilReplyError()
    if isinstance(reply, int):
        return reply != 0
    if isinstance(reply, str):
        reply = reply.encode()
    if isinstance(reply, bytes):
        if reply in _TRUE:
            return True
        if reply in _FALSE:
            return False
    raise UnexpectedReplyError("boolean", reply)


def to_values(reply: Any) -> list[Any]:
    if reply is None:
        raise NilReplyError()
    if isinstance(reply, (list, tuple, set)):
        return list(reply)
    raise UnexpectedReplyError("array", reply)


def to_strings(reply: Any) -> list[str]:
    """Convert an array reply to strings; nil elements become ``""``."""
    return ["" if item is None else to_str(item) for item in to_values(reply)]


def is_ok(reply: Any) -> bool:
    return reply in (b"OK", "OK")


__all__ = ["is_ok", "to_bool", "to_bytes", "to_int", "to_str", "to_strings", "to_values"]
