"""Redis adapter – set commands on a borrowed connection."""
from __future__ import annotations

from typing import Any

from depcache.adapters.redis import commands
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.dependency import link_dependencies
from depcache.adapters.redis.replies import to_bool, to_strings


async def set_add(conn: RedisConnection, set_name: str, member: Any, *dependencies: str) -> None:
    """Add *member* and link the whole set to every dependency."""
    await conn.do(commands.ADD_TO_SET, set_name, member)
    await link_dependencies(conn, set_name, *dependencies)


async def set_add_many(conn: RedisConnection, set_name: str, *members: Any) -> None:
    if not members:
        return
    await conn.do(commands.ADD_TO_SET, set_name, *members)


async def set_is_member(conn: RedisConnection, set_name: str, member: Any) -> bool:
    return to_bool(await conn.do(commands.IS_MEMBER, set_name, member))


async def set_members(conn: RedisConnection, set_name: str) -> list[str]:
    return to_strings(await conn.do(commands.MEMBERS, set_name))


async def set_remove_member(conn: RedisConnection, set_name: str, member: Any) -> None:
    await conn.do(commands.REMOVE_MEMBER, set_name, member)


__all__ = ["set_add", "set_add_many", "set_is_member", "set_members", "set_remove_member"]
