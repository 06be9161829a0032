"""Redis adapter – list commands on a borrowed connection."""
from __future__ import annotations

from typing import Any, Iterable

from depcache.adapters.redis import commands
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.replies import to_strings


async def get_list(conn: RedisConnection, key: str) -> list[str]:
    """Every element of the list at *key* (``LRANGE key 0 -1``)."""
    return to_strings(await conn.do(commands.LIST_RANGE, key, 0, -1))


async def set_list(conn: RedisConnection, key: str, values: Iterable[Any]) -> None:
    """Append *values* to the list at *key* (``RPUSH``)."""
    values = list(values)
    if not values:
        return
    await conn.do(commands.LIST_PUSH, key, *values)


__all__ = ["get_list", "set_list"]
