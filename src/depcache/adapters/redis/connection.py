"""Redis adapter – RedisConnection, a thin wire client over one socket.

A ``RedisConnection`` writes commands and reads replies in order. ``send``
queues a command without reading its reply, ``drain`` reads every pending
reply and ``do`` is the two combined. Replies come back raw (``bytes``,
``int``, ``list`` or ``None``); see :mod:`depcache.adapters.redis.replies`
for typed conversion.

redis-py exceptions never escape this module: they are translated into the
:mod:`depcache.kernel.errors` hierarchy, and any transport or protocol failure
marks the connection broken so the pool will not hand it out again.
"""
from __future__ import annotations

import asyncio
from typing import Any, Iterable

from redis import exceptions as redis_exceptions
from redis.asyncio.connection import AbstractConnection

from depcache.adapters.redis import commands
from depcache.kernel.errors import (
    CommandError,
    ConnectionError,
    InfrastructureTimeoutError,
    NoScriptError,
    ProtocolError,
    UnexpectedReplyError,
)
from depcache.observability.logging import get_logger

logger = get_logger(__name__)

WireArg = str | bytes | int | float


def pack_arg(value: Any) -> WireArg:
    """Convert one argument to something the RESP encoder accepts as a bulk string."""
    if isinstance(value, bool):
        return b"1" if value else b"0"
    if isinstance(value, (str, bytes, int, float)):
        return value
    if value is None:
        return b""
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return str(value)


def pack_args(values: Iterable[Any]) -> list[WireArg]:
    return [pack_arg(value) for value in values]


class RedisConnection:
    """One live connection to the store, borrowed from a pool by one caller at a time."""

    def __init__(self, raw: AbstractConnection, *, address: str, created_at: float = 0.0) -> None:
        self._raw = raw
        self.address = address
        self.created_at = created_at
        self.returned_at = created_at
        self.pending = 0
        self.broken = False

    @property
    def reusable(self) -> bool:
        """True when every reply has been read and no failure was seen."""
        return not self.broken and self.pending == 0

    def mark_broken(self) -> None:
        self.broken = True

    async def send(self, command: str, *args: Any) -> None:
        """Write one command without waiting for its reply."""
        if self.broken:
            raise ConnectionError(self.address, "connection is broken")
        # Counted before the write: a cancelled write leaves the stream unusable.
        self.pending += 1
        try:
            await self._raw.send_command(command, *pack_args(args), check_health=False)
        except asyncio.CancelledError:
            self.broken = True
            raise
        except (redis_exceptions.RedisError, OSError) as exc:
            raise self._translate(exc) from exc

    async def receive(self) -> Any:
        """Read the oldest pending reply."""
        if self.pending == 0:
            raise ProtocolError("no pending reply to read")
        try:
            reply = await self._raw.read_response()
        except redis_exceptions.ResponseError as exc:
            self.pending -= 1
            raise self._translate(exc) from exc
        except (redis_exceptions.RedisError, OSError) as exc:
            raise self._translate(exc) from exc
        self.pending -= 1
        return reply

    async def drain(self) -> Any:
        """Read every pending reply and return the last one.

        When some reply is an error reply, all replies are still consumed and
        the first error is raised afterwards.
        """
        reply: Any = None
        first_error: CommandError | None = None
        while self.pending:
            try:
                reply = await self.receive()
            except CommandError as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error
        return reply

    async def do(self, command: str, *args: Any) -> Any:
        """Send one command and read its reply (plus any still pending)."""
        await self.send(command, *args)
        return await self.drain()

    async def ping(self) -> None:
        reply = await self.do(commands.PING)
        if reply not in (b"PONG", "PONG"):
            self.broken = True
            raise UnexpectedReplyError("PONG", reply)

    async def close(self) -> None:
        self.broken = True
        try:
            await self._raw.disconnect()
        except (redis_exceptions.RedisError, OSError) as exc:
            logger.debug("connection_close_failed", address=self.address, error=str(exc))

    def _translate(self, exc: BaseException) -> Exception:
        if isinstance(exc, redis_exceptions.NoScriptError):
            return NoScriptError(str(exc), cause=exc)
        if isinstance(exc, redis_exceptions.ResponseError):
            return CommandError(str(exc), cause=exc)
        self.broken = True
        if isinstance(exc, redis_exceptions.TimeoutError):
            return InfrastructureTimeoutError(f"{self.address}: {exc}", cause=exc)
        if isinstance(exc, (redis_exceptions.ConnectionError, OSError)):
            return ConnectionError(self.address, f"{self.address}: {exc}", cause=exc)
        return ProtocolError(f"{self.address}: {exc}", cause=exc)

    def __repr__(self) -> str:
        return f"RedisConnection(address={self.address!r}, pending={self.pending}, broken={self.broken})"


__all__ = ["RedisConnection", "WireArg", "pack_arg", "pack_args"]
