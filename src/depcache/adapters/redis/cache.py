"""Redis adapter – RedisCache, the client façade.

Each public method borrows a connection from the pool, runs one logical
operation on it, and returns the connection. Writes that accept
``*dependencies`` link the written key to those tags after the primitive
write; :meth:`RedisCache.kill_by_dependency` later removes everything linked
to a tag in one atomic step.

Every method takes a keyword-only ``deadline``. Without one, the deadline
active in :class:`~depcache.resilience.DeadlineContext` applies. When it
expires the operation is cancelled and its connection discarded.
"""
from __future__ import annotations

import asyncio
import contextlib
import inspect
from datetime import timedelta
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, TypeVar

from depcache.adapters.redis import dependency, hashes, lists, lock, sets, strings
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.dialer import Dialer, DialOptions
from depcache.adapters.redis.durations import Duration
from depcache.adapters.redis.hashes import Pairs
from depcache.adapters.redis.pool import ConnectionPool, PoolStats
from depcache.adapters.redis.scripts import ScriptRegistry
from depcache.config.settings import RedisCacheSettings
from depcache.config.url import RedisURL
from depcache.kernel.errors import NilReplyError, PoolClosedError, ProtocolError
from depcache.observability.logging import get_logger
from depcache.resilience import Deadline, deadline_aware

logger = get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[RedisConnection], Awaitable[T]]


class RedisCache:
    """Tag-aware cache client over a :class:`ConnectionPool`.

    Build one with :func:`connect` or :meth:`from_settings`; close it with
    :meth:`close` or ``async with``. Safe for concurrent use by many tasks on
    one event loop.
    """

    def __init__(self, pool: ConnectionPool, scripts: ScriptRegistry | None = None) -> None:
        self._pool = pool
        self._scripts = scripts or ScriptRegistry()
        self._background: set[asyncio.Task[None]] = set()

    @classmethod
    async def from_settings(
        cls,
        settings: RedisCacheSettings,
        dial_options: DialOptions | None = None,
    ) -> "RedisCache":
        options = dial_options or DialOptions(
            connect_timeout=settings.connect_timeout or None,
            read_timeout=settings.read_timeout or None,
        )
        return await connect(
            settings.url,
            max_active_connections=settings.max_active_connections,
            max_idle_connections=settings.max_idle_connections,
            max_conn_lifetime=settings.max_conn_lifetime,
            idle_timeout=settings.idle_timeout,
            dependency_mode=settings.dependency_mode,
            wait=settings.wait,
            dial_options=options,
        )

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @property
    def scripts(self) -> ScriptRegistry:
        return self._scripts

    @property
    def stats(self) -> PoolStats:
        return self._pool.stats

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def get_connection(self, *, deadline: Deadline | None = None) -> RedisConnection:
        """Borrow a connection. It must be handed back with :meth:`release_connection`."""
        return await deadline_aware(self._pool.get(), deadline)

    async def release_connection(self, conn: RedisConnection) -> None:
        await self._pool.put(conn)

    @contextlib.asynccontextmanager
    async def connection(self, *, deadline: Deadline | None = None) -> AsyncIterator[RedisConnection]:
        """Borrow a connection for the duration of the ``async with`` block."""
        conn = await self.get_connection(deadline=deadline)
        try:
            yield conn
        except (ProtocolError, asyncio.CancelledError):
            conn.mark_broken()
            raise
        finally:
            await self.release_connection(conn)

    async def warm_up(self, *, deadline: Deadline | None = None) -> None:
        """Load every server-side script on one connection."""
        await self._run(self._scripts.warm_up, deadline)

    async def close(self) -> None:
        """Close the pool after every pending background store has finished.

        Failures of those stores are logged by their own callbacks.
        """
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        await self._pool.close()

    async def __aenter__(self) -> "RedisCache":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def _run(self, operation: Operation[T], deadline: Deadline | None) -> T:
        async def run() -> T:
            async with self.connection() as conn:
                return await operation(conn)

        return await deadline_aware(run(), deadline)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def set(self, key: str, value: Any, *dependencies: str, deadline: Deadline | None = None) -> None:
        await self._run(lambda conn: strings.set(conn, key, value, *dependencies), deadline)

    async def set_exp(
        self,
        key: str,
        value: Any,
        ttl: Duration,
        *dependencies: str,
        deadline: Deadline | None = None,
    ) -> None:
        await self._run(lambda conn: strings.set_exp(conn, key, value, ttl, *dependencies), deadline)

    async def hash_set(
        self,
        hash_name: str,
        field: Any,
        value: Any,
        *dependencies: str,
        deadline: Deadline | None = None,
    ) -> None:
        await self._run(lambda conn: hashes.hash_set(conn, hash_name, field, value, *dependencies), deadline)

    async def hash_map_set(
        self,
        hash_name: str,
        pairs: Pairs,
        *dependencies: str,
        deadline: Deadline | None = None,
    ) -> None:
        await self._run(lambda conn: hashes.hash_map_set(conn, hash_name, pairs, *dependencies), deadline)

    async def hash_map_set_exp(
        self,
        hash_name: str,
        pairs: Pairs,
        ttl: Duration,
        *dependencies: str,
        deadline: Deadline | None = None,
    ) -> None:
        await self._run(
            lambda conn: hashes.hash_map_set_exp(conn, hash_name, pairs, ttl, *dependencies),
            deadline,
        )

    async def set_add(
        self,
        set_name: str,
        member: Any,
        *dependencies: str,
        deadline: Deadline | None = None,
    ) -> None:
        await self._run(lambda conn: sets.set_add(conn, set_name, member, *dependencies), deadline)

    async def set_add_many(self, set_name: str, *members: Any, deadline: Deadline | None = None) -> None:
        await self._run(lambda conn: sets.set_add_many(conn, set_name, *members), deadline)

    async def set_remove_member(self, set_name: str, member: Any, *, deadline: Deadline | None = None) -> None:
        await self._run(lambda conn: sets.set_remove_member(conn, set_name, member), deadline)

    async def set_list(self, key: str, values: Iterable[Any], *, deadline: Deadline | None = None) -> None:
        await self._run(lambda conn: lists.set_list(conn, key, values), deadline)

    async def set_to_json(
        self,
        key: str,
        data: Any,
        ttl: Duration = 0,
        *dependencies: str,
        deadline: Deadline | None = None,
    ) -> None:
        await self._run(lambda conn: strings.set_to_json(conn, key, data, ttl, *dependencies), deadline)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, key: str, *, deadline: Deadline | None = None) -> str:
        """Value of *key*; raises :class:`NilReplyError` when missing.

        The value is decoded as UTF-8 with invalid bytes replaced by U+FFFD.
        Read binary values with :meth:`get_bytes`.
        """
        return await self._run(lambda conn: strings.get(conn, key), deadline)

    async def get_bytes(self, key: str, *, deadline: Deadline | None = None) -> bytes:
        return await self._run(lambda conn: strings.get_bytes(conn, key), deadline)

    async def get_list(self, key: str, *, deadline: Deadline | None = None) -> list[str]:
        return await self._run(lambda conn: lists.get_list(conn, key), deadline)

    async def hash_get(self, hash_name: str, field: Any, *, deadline: Deadline | None = None) -> str:
        """Field of *hash_name* decoded as UTF-8 like :meth:`get`."""
        return await self._run(lambda conn: hashes.hash_get(conn, hash_name, field), deadline)

    async def hash_map_get(self, hash_name: str, *fields: Any, deadline: Deadline | None = None) -> list[str]:
        return await self._run(lambda conn: hashes.hash_map_get(conn, hash_name, *fields), deadline)

    async def set_is_member(self, set_name: str, member: Any, *, deadline: Deadline | None = None) -> bool:
        return await self._run(lambda conn: sets.set_is_member(conn, set_name, member), deadline)

    async def set_members(self, set_name: str, *, deadline: Deadline | None = None) -> list[str]:
        return await self._run(lambda conn: sets.set_members(conn, set_name), deadline)

    async def exists(self, key: str, *, deadline: Deadline | None = None) -> bool:
        return await self._run(lambda conn: strings.exists(conn, key), deadline)

    async def get_all_keys(self, *, deadline: Deadline | None = None) -> list[str]:
        return await self._run(strings.get_all_keys, deadline)

    async def get_from_json(self, key: str, *, deadline: Deadline | None = None) -> Any:
        return await self._run(lambda conn: strings.get_from_json(conn, key), deadline)

    async def get_or_set_json(
        self,
        key: str,
        factory: Callable[[], Any],
        ttl: Duration = 0,
        *dependencies: str,
        background: bool = False,
        deadline: Deadline | None = None,
    ) -> Any:
        """Return the cached JSON value of *key*, or build, store and return it.

        *factory* may be a plain or an async callable. With ``background=True``
        the store runs as a separate task and the value is returned at once;
        failures of that task are logged.
        """
        try:
            return await self.get_from_json(key, deadline=deadline)
        except NilReplyError:
            pass

        value = factory()
        if inspect.isawaitable(value):
            value = await value

        if not background:
            await self.set_to_json(key, value, ttl, *dependencies, deadline=deadline)
            return value

        task = asyncio.create_task(self.set_to_json(key, value, ttl, *dependencies))
        self._background.add(task)
        task.add_done_callback(self._background_done(key))
        return value

    def _background_done(self, key: str) -> Callable[[asyncio.Task[None]], None]:
        def done(task: asyncio.Task[None]) -> None:
            self._background.discard(task)
            if task.cancelled():
                return
            exc = task.exception()
            if exc is not None:
                logger.error("background_set_failed", key=key, error=str(exc), exc_info=exc)

        return done

    # ------------------------------------------------------------------
    # Deletes, expiry and server commands
    # ------------------------------------------------------------------

    async def delete(self, *keys: str, deadline: Deadline | None = None) -> int:
        """Alias of :meth:`kill_by_dependency`."""
        return await self.kill_by_dependency(*keys, deadline=deadline)

    async def delete_without_dependency(self, *keys: str, deadline: Deadline | None = None) -> int:
        if not keys:
            return 0
        return await self._run(lambda conn: strings.delete_without_dependency(conn, *keys), deadline)

    async def kill_by_dependency(self, *tags: str, deadline: Deadline | None = None) -> int:
        """Delete every key linked to any of *tags* and the tag indices.

        Returns the number of keys removed by the atomic script phase.
        """
        if not tags:
            return 0
        return await self._run(lambda conn: dependency.kill_by_dependency(conn, self._scripts, *tags), deadline)

    async def expire(self, key: str, ttl: Duration, *, deadline: Deadline | None = None) -> bool:
        return await self._run(lambda conn: strings.expire(conn, key, ttl), deadline)

    async def ping(self, *, deadline: Deadline | None = None) -> None:
        await self._run(lambda conn: conn.ping(), deadline)

    async def destroy_cache(self, *, deadline: Deadline | None = None) -> None:
        await self._run(strings.destroy_cache, deadline)

    # ------------------------------------------------------------------
    # Locks
    # ------------------------------------------------------------------

    async def write_lock(
        self,
        name: str,
        secret: str,
        ttl: Duration,
        *,
        deadline: Deadline | None = None,
    ) -> bool:
        """Take or refresh *name* for *secret*; raises :class:`LockMismatchError` if held by another."""
        return await self._run(lambda conn: lock.write_lock(conn, self._scripts, name, secret, ttl), deadline)

    async def release_lock(self, name: str, secret: str, *, deadline: Deadline | None = None) -> bool:
        return await self._run(lambda conn: lock.release_lock(conn, self._scripts, name, secret), deadline)


async def connect(
    url: str,
    max_active_connections: int = 0,
    max_idle_connections: int = 0,
    max_conn_lifetime: Duration = 0,
    idle_timeout: Duration = 0,
    dependency_mode: bool = False,
    *,
    wait: bool = True,
    dial_options: DialOptions | None = None,
) -> RedisCache:
    """Create a pool for *url* and return a :class:`RedisCache` over it.

    Nothing is dialed until the first borrow, unless *dependency_mode* is set:
    then the server-side scripts are loaded right away and a failure closes
    the pool before re-raising.
    """
    parsed = RedisURL.parse(url)
    pool = ConnectionPool(
        Dialer(parsed, dial_options),
        max_active=max_active_connections,
        max_idle=max_idle_connections,
        max_conn_lifetime=_seconds(max_conn_lifetime),
        idle_timeout=_seconds(idle_timeout),
        wait=wait,
    )
    cache = RedisCache(pool)
    logger.info(
        "redis_cache_connected",
        url=parsed.redacted(),
        max_active=max_active_connections,
        max_idle=max_idle_connections,
        dependency_mode=dependency_mode,
    )
    if dependency_mode:
        try:
            await cache.warm_up()
        except BaseException:
            await cache.close()
            raise
    return cache


def _seconds(value: Duration) -> float:
    return value.total_seconds() if isinstance(value, timedelta) else float(value)


_default_cache: RedisCache | None = None


def set_default_cache(cache: RedisCache | None) -> None:
    """Install (or clear, with ``None``) the process-wide default client."""
    global _default_cache
    _default_cache = cache


def get_default_cache() -> RedisCache:
    if _default_cache is None or _default_cache.pool.closed:
        raise PoolClosedError("no default cache configured")
    return _default_cache


__all__ = ["RedisCache", "connect", "get_default_cache", "set_default_cache"]
