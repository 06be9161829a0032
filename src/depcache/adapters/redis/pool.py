"""Redis adapter – ConnectionPool: bounded, lazily dialed pool of connections.

``active`` counts every open connection, idle or borrowed, so no more than
``max_active`` connections are ever borrowed at once. Idle connections are
kept most-recently-returned first; eviction and ``max_idle`` trimming take
from the other end.
"""
from __future__ import annotations

import asyncio
import collections
import dataclasses
from typing import Awaitable, Callable

from depcache.adapters.redis.connection import RedisConnection
from depcache.kernel.errors import BaseError, PoolClosedError, PoolExhaustedError
from depcache.kernel.time import Clock, MonotonicClock
from depcache.observability.logging import get_logger

logger = get_logger(__name__)

TEST_ON_BORROW_AFTER = 60.0

DialFunc = Callable[[], Awaitable[RedisConnection]]


@dataclasses.dataclass(frozen=True)
class PoolStats:
    active: int
    idle: int
    closed: bool

    @property
    def in_use(self) -> int:
        return self.active - self.idle


class ConnectionPool:
    """Pool of :class:`RedisConnection` objects for a single destination.

    Args:
        dial: Coroutine factory that opens a new connection.
        max_active: Upper bound on open connections; ``0`` means unbounded.
        max_idle: Upper bound on idle connections kept for reuse; ``0`` keeps none.
        max_conn_lifetime: Seconds after which a connection is closed instead
            of reused; ``0`` disables the check.
        idle_timeout: Seconds an idle connection may sit unused; ``0``
            disables the check.
        wait: When every connection is borrowed, wait for one to be returned
            (``True``) or raise :class:`PoolExhaustedError` (``False``).
        clock: Time source, swappable in tests.
        test_on_borrow_after: Idle seconds after which a reused connection is
            probed with ``PING`` before being handed out.
    """

    def __init__(
        self,
        dial: DialFunc,
        *,
        max_active: int = 0,
        max_idle: int = 0,
        max_conn_lifetime: float = 0.0,
        idle_timeout: float = 0.0,
        wait: bool = True,
        clock: Clock | None = None,
        test_on_borrow_after: float = TEST_ON_BORROW_AFTER,
    ) -> None:
        self._dial = dial
        self.max_active = max_active
        self.max_idle = max_idle
        self.max_conn_lifetime = max_conn_lifetime
        self.idle_timeout = idle_timeout
        self.wait = wait
        self.test_on_borrow_after = test_on_borrow_after
        self._clock = clock or MonotonicClock()
        self._idle: collections.deque[RedisConnection] = collections.deque()
        self._active = 0
        self._closed = False
        self._cond = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stats(self) -> PoolStats:
        return PoolStats(active=self._active, idle=len(self._idle), closed=self._closed)

    def _expired(self, conn: RedisConnection, now: float) -> bool:
        return bool(self.max_conn_lifetime) and now - conn.created_at >= self.max_conn_lifetime

    def _collect_stale(self, now: float) -> list[RedisConnection]:
        """Remove idle connections past their idle timeout or lifetime. Caller holds the lock."""
        stale: list[RedisConnection] = []
        if self.idle_timeout:
            while self._idle and now - self._idle[-1].returned_at >= self.idle_timeout:
                stale.append(self._idle.pop())
        if self.max_conn_lifetime:
            expired = [c for c in self._idle if self._expired(c, now)]
            for conn in expired:
                self._idle.remove(conn)
            stale.extend(expired)
        self._active -= len(stale)
        return stale

    async def _close_all(self, conns: list[RedisConnection]) -> None:
        for conn in conns:
            await conn.close()

    async def get(self) -> RedisConnection:
        """Borrow a connection, dialing a new one when none is idle."""
        while True:
            candidate: RedisConnection | None = None
            stale: list[RedisConnection] = []
            async with self._cond:
                while True:
                    if self._closed:
                        raise PoolClosedError()
                    stale = self._collect_stale(self._clock.now())
                    if stale:
                        break
                    if self._idle:
                        candidate = self._idle.popleft()
                        break
                    if not self.max_active or self._active < self.max_active:
                        self._active += 1
                        break
                    if not self.wait:
                        raise PoolExhaustedError()
                    await self._cond.wait()

            # Nothing is reserved while stale connections close.
            if stale:
                async with self._cond:
                    self._cond.notify(len(stale))
                await self._close_all(stale)
                continue

            if candidate is None:
                return await self._dial_new()
            try:
                healthy = await self._healthy(candidate)
            except BaseException:
                await self._discard(candidate)
                raise
            if healthy:
                return candidate
            await self._discard(candidate)

    async def _dial_new(self) -> RedisConnection:
        try:
            conn = await self._dial()
        except BaseException:
            async with self._cond:
                self._active -= 1
                self._cond.notify()
            raise
        logger.debug("pool_dialed", address=conn.address, active=self._active)
        return conn

    async def _healthy(self, conn: RedisConnection) -> bool:
        if self._clock.now() - conn.returned_at < self.test_on_borrow_after:
            return True
        try:
            await conn.ping()
        except BaseError as exc:
            logger.warning("pool_probe_failed", address=conn.address, error=str(exc))
            return False
        return True

    async def _discard(self, conn: RedisConnection) -> None:
        async with self._cond:
            self._active -= 1
            self._cond.notify()
        await conn.close()

    async def put(self, conn: RedisConnection) -> None:
        """Return a borrowed connection; broken or surplus connections are closed."""
        victim: RedisConnection | None = None
        async with self._cond:
            now = self._clock.now()
            if self._closed or not conn.reusable or self._expired(conn, now) or self.max_idle <= 0:
                victim = conn
            else:
                conn.returned_at = now
                self._idle.appendleft(conn)
                if len(self._idle) > self.max_idle:
                    victim = self._idle.pop()
            if victim is not None:
                self._active -= 1
            self._cond.notify()
        if victim is not None:
            await victim.close()

    async def close(self) -> None:
        """Refuse further borrows and close every idle connection.

        Borrowed connections stay usable by their holders and are closed when
        returned.
        """
        async with self._cond:
            if self._closed:
                return
            self._closed = True
            idle = list(self._idle)
            self._idle.clear()
            self._active -= len(idle)
            self._cond.notify_all()
        await self._close_all(idle)
        logger.info("pool_closed", closed_idle=len(idle), still_borrowed=self._active)


__all__ = ["ConnectionPool", "DialFunc", "PoolStats", "TEST_ON_BORROW_AFTER"]
