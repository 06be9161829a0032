"""Redis adapter – distributed advisory locks fenced by a secret.

A lock is a plain key whose value is the holder's secret and whose TTL is
reset on every successful acquire. Acquire and release each run as one
server-side script, so the ownership check and the mutation are atomic.
There is no monotonic fencing token; the secret is the fence.
"""
from __future__ import annotations

import secrets as _secrets
from typing import TYPE_CHECKING

from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.durations import Duration, ttl_seconds
from depcache.adapters.redis.replies import to_int
from depcache.adapters.redis.scripts import LOCK_ACQUIRE, LOCK_RELEASE, ScriptRegistry
from depcache.kernel.errors import LockMismatchError, ValidationError
from depcache.observability.logging import get_logger

if TYPE_CHECKING:
    from depcache.adapters.redis.cache import RedisCache

logger = get_logger(__name__)


async def write_lock(
    conn: RedisConnection,
    scripts: ScriptRegistry,
    name: str,
    secret: str,
    ttl: Duration,
) -> bool:
    """Take or refresh the lock *name* for *secret*.

    Returns ``True`` when the lock is now held by *secret* with a fresh TTL;
    raises :class:`LockMismatchError` when another secret holds it. The TTL
    must be at least one whole second.
    """
    seconds = ttl_seconds(ttl)
    if seconds <= 0:
        raise ValidationError(f"lock ttl must be at least one second, got {ttl!r}", field="ttl")
    reply = to_int(await scripts.invoke(conn, LOCK_ACQUIRE, keys=[name], args=[secret, seconds]))
    if reply != 0:
        return True
    logger.debug("lock_mismatch", lock=name, operation="acquire")
    raise LockMismatchError(name)


async def release_lock(
    conn: RedisConnection,
    scripts: ScriptRegistry,
    name: str,
    secret: str,
) -> bool:
    """Release *name* if held by *secret*.

    Releasing a lock that no longer exists (expired or already released)
    returns ``True``; a lock held by another secret raises
    :class:`LockMismatchError`.
    """
    reply = to_int(await scripts.invoke(conn, LOCK_RELEASE, keys=[name], args=[secret]))
    if reply != 0:
        return True
    logger.debug("lock_mismatch", lock=name, operation="release")
    raise LockMismatchError(name)


class RedisLock:
    """Async context manager around :meth:`RedisCache.write_lock` / ``release_lock``.

    A random secret is generated when none is given. Long-running holders call
    :meth:`refresh` (a re-acquire with the same secret) as a heartbeat.

    Example::

        async with RedisLock(cache, "jobs:nightly", ttl=30) as lock:
            ...
            await lock.refresh()
    """

    def __init__(
        self,
        cache: "RedisCache",
        name: str,
        ttl: Duration = 10,
        *,
        secret: str | None = None,
    ) -> None:
        self._cache = cache
        self.name = name
        self.ttl = ttl
        self.secret = secret or _secrets.token_hex(16)
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    async def acquire(self) -> bool:
        self._held = await self._cache.write_lock(self.name, self.secret, self.ttl)
        return self._held

    async def refresh(self) -> bool:
        """Reset the TTL; raises :class:`LockMismatchError` if the lock was lost."""
        try:
            return await self.acquire()
        except LockMismatchError:
            self._held = False
            raise

    async def release(self) -> bool:
        if not self._held:
            return True
        try:
            return await self._cache.release_lock(self.name, self.secret)
        finally:
            self._held = False

    async def __aenter__(self) -> "RedisLock":
        await self.acquire()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.release()


__all__ = ["RedisLock", "release_lock", "write_lock"]
