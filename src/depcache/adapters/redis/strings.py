"""Redis adapter – string values and keyspace commands on a borrowed connection."""
from __future__ import annotations

import json
from typing import Any

from depcache.adapters.redis import commands
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.dependency import link_dependencies
from depcache.adapters.redis.durations import Duration, ttl_seconds
from depcache.adapters.redis.replies import to_bool, to_bytes, to_int, to_str, to_strings
from depcache.kernel.errors import SerializationError


async def get(conn: RedisConnection, key: str) -> str:
    return to_str(await conn.do(commands.GET, key))


async def get_bytes(conn: RedisConnection, key: str) -> bytes:
    return to_bytes(await conn.do(commands.GET, key))


async def set(conn: RedisConnection, key: str, value: Any, *dependencies: str) -> None:  # noqa: A001
    """``SET key value`` then link *key* to every dependency."""
    await conn.do(commands.SET, key, value)
    await link_dependencies(conn, key, *dependencies)


async def set_exp(
    conn: RedisConnection,
    key: str,
    value: Any,
    ttl: Duration,
    *dependencies: str,
) -> None:
    """``SETEX key ttl value`` then link. A TTL under one second stores without expiry."""
    seconds = ttl_seconds(ttl)
    if seconds <= 0:
        await set(conn, key, value, *dependencies)
        return
    await conn.do(commands.SET_EXPIRATION, key, seconds, value)
    await link_dependencies(conn, key, *dependencies)


async def exists(conn: RedisConnection, key: str) -> bool:
    return to_bool(await conn.do(commands.EXISTS, key))


async def expire(conn: RedisConnection, key: str, ttl: Duration) -> bool:
    """Set the expiration of *key*; ``False`` when the key does not exist."""
    return to_bool(await conn.do(commands.EXPIRE, key, ttl_seconds(ttl)))


async def delete_without_dependency(conn: RedisConnection, *keys: str) -> int:
    """``DEL`` each key on its own, bypassing the dependency script."""
    total = 0
    for key in keys:
        total += to_int(await conn.do(commands.DELETE, key))
    return total


async def get_all_keys(conn: RedisConnection) -> list[str]:
    return to_strings(await conn.do(commands.KEYS, commands.ALL_KEYS))


async def destroy_cache(conn: RedisConnection) -> None:
    """``FLUSHALL``: removes every key on the server; loaded scripts survive."""
    await conn.do(commands.FLUSH_ALL)


async def set_to_json(
    conn: RedisConnection,
    key: str,
    data: Any,
    ttl: Duration = 0,
    *dependencies: str,
) -> None:
    try:
        payload = json.dumps(data)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"cannot encode value for {key!r} as JSON: {exc}",
            payload_type=type(data).__name__,
            cause=exc,
        ) from exc
    await set_exp(conn, key, payload, ttl, *dependencies)


async def get_from_json(conn: RedisConnection, key: str) -> Any:
    raw = await get_bytes(conn, key)
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise SerializationError(f"value of {key!r} is not valid JSON: {exc}", cause=exc) from exc


__all__ = [
    "delete_without_dependency",
    "destroy_cache",
    "exists",
    "expire",
    "get",
    "get_all_keys",
    "get_bytes",
    "get_from_json",
    "set",
    "set_exp",
    "set_to_json",
]
