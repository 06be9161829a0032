"""Redis adapter – hash commands on a borrowed connection.

Dependencies link the hash name, so killing a tag removes the whole hash.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from depcache.adapters.redis import commands
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.dependency import link_dependencies
from depcache.adapters.redis.durations import Duration, ttl_seconds
from depcache.adapters.redis.replies import to_str, to_strings
from depcache.kernel.errors import ValidationError

Pairs = Mapping[Any, Any] | Iterable[tuple[Any, Any]]


def _flatten(pairs: Pairs) -> list[Any]:
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    flat: list[Any] = []
    for field, value in items:
        flat.extend((field, value))
    if not flat:
        raise ValidationError("hash map set needs at least one field/value pair", field="pairs")
    return flat


async def hash_set(
    conn: RedisConnection,
    hash_name: str,
    field: Any,
    value: Any,
    *dependencies: str,
) -> None:
    await conn.do(commands.HASH_KEY_SET, hash_name, field, value)
    await link_dependencies(conn, hash_name, *dependencies)


async def hash_get(conn: RedisConnection, hash_name: str, field: Any) -> str:
    return to_str(await conn.do(commands.HASH_GET, hash_name, field))


async def hash_map_get(conn: RedisConnection, hash_name: str, *fields: Any) -> list[str]:
    """Values of *fields* in order; missing fields come back as ``""``."""
    if not fields:
        return []
    return to_strings(await conn.do(commands.HASH_MAP_GET, hash_name, *fields))


async def hash_map_set(
    conn: RedisConnection,
    hash_name: str,
    pairs: Pairs,
    *dependencies: str,
) -> None:
    await conn.do(commands.HASH_MAP_SET, hash_name, *_flatten(pairs))
    await link_dependencies(conn, hash_name, *dependencies)


async def hash_map_set_exp(
    conn: RedisConnection,
    hash_name: str,
    pairs: Pairs,
    ttl: Duration,
    *dependencies: str,
) -> None:
    """``HMSET`` + ``EXPIRE`` in whole seconds, then link. No ``EXPIRE`` for a TTL under one second."""
    await conn.do(commands.HASH_MAP_SET, hash_name, *_flatten(pairs))
    seconds = ttl_seconds(ttl)
    if seconds > 0:
        await conn.do(commands.EXPIRE, hash_name, seconds)
    await link_dependencies(conn, hash_name, *dependencies)


__all__ = ["Pairs", "hash_get", "hash_map_get", "hash_map_set", "hash_map_set_exp", "hash_set"]
