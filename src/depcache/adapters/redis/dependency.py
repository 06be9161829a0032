"""Redis adapter – dependency tags: linking keys to tags and killing by tag.

A tag ``T`` is stored as the set ``depend:T`` whose members are the keys
written with that tag. Members may be stale: overwriting or expiring a key
does not prune the indices it appears in.
"""
from __future__ import annotations

from typing import Any

from depcache.adapters.redis import commands
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.replies import to_int, to_values
from depcache.adapters.redis.scripts import KILL_BY_DEPENDENCY, ScriptRegistry
from depcache.kernel.errors import CommandError
from depcache.observability.logging import get_logger

logger = get_logger(__name__)

DEPENDENCY_PREFIX = commands.DEPENDENCY_PREFIX


def dependency_key(tag: str) -> str:
    return DEPENDENCY_PREFIX + tag


async def link_dependencies(conn: RedisConnection, key: Any, *dependencies: str) -> None:
    """Add *key* to the index of every tag in one ``MULTI``/``EXEC`` block.

    Either every index gains the key or none does. The write that precedes a
    link is not part of the transaction, so a failure here leaves the value
    stored but untagged.
    """
    if not dependencies:
        return

    await conn.send(commands.MULTI)
    for dependency in dependencies:
        await conn.send(commands.ADD_TO_SET, dependency_key(dependency), key)
    reply = await conn.do(commands.EXEC)

    if reply is None:
        return
    for item in to_values(reply):
        if isinstance(item, Exception):
            raise CommandError(f"linking dependencies of {key!r}: {item}", cause=item)


async def kill_by_dependency(conn: RedisConnection, scripts: ScriptRegistry, *tags: str) -> int:
    """Delete every key linked to any of *tags*, plus the tag indices themselves.

    The script phase is atomic and its count is returned. A follow-up plain
    ``DEL`` over the unprefixed tag names removes user keys that share a
    tag's name; it is best effort and not atomic with the script.
    """
    if not tags:
        return 0

    keys = [dependency_key(tag) for tag in tags]
    total = to_int(await scripts.invoke(conn, KILL_BY_DEPENDENCY, args=keys))
    await conn.do(commands.DELETE, *tags)

    logger.debug("killed_by_dependency", tags=len(tags), deleted=total)
    return total


async def delete(conn: RedisConnection, scripts: ScriptRegistry, *keys: str) -> int:
    """Alias of :func:`kill_by_dependency`."""
    return await kill_by_dependency(conn, scripts, *keys)


__all__ = [
    "DEPENDENCY_PREFIX",
    "delete",
    "dependency_key",
    "kill_by_dependency",
    "link_dependencies",
]
