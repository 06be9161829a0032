"""Redis adapter – server-side scripts and the digest registry.

Scripts are loaded with ``SCRIPT LOAD`` and invoked with ``EVALSHA``. When the
store answers ``NOSCRIPT`` (restart, ``SCRIPT FLUSH``, failover) the registry
re-loads the source and retries exactly once.
"""
from __future__ import annotations

import asyncio
import dataclasses
import hashlib
from typing import Any, Iterable, Sequence

from depcache.adapters.redis import commands
from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.replies import to_str
from depcache.kernel.errors import NoScriptError, ScriptError, ValidationError
from depcache.observability.logging import get_logger

logger = get_logger(__name__)

KILL_BY_DEPENDENCY = "kill-by-dependency"
LOCK_ACQUIRE = "lock-acquire"
LOCK_RELEASE = "lock-release"


@dataclasses.dataclass(frozen=True)
class Script:
    """A Lua script addressed by the SHA1 digest of its source."""

    name: str
    source: str
    key_count: int = 0

    @property
    def digest(self) -> str:
        return hashlib.sha1(self.source.encode()).hexdigest()  # noqa: S324


# ARGV holds tag-index keys. Deletes every index plus every member, in DEL
# batches small enough for the Lua stack.
KILL_BY_DEPENDENCY_SCRIPT = Script(
    name=KILL_BY_DEPENDENCY,
    source="""
local all_keys = {}
for _, key in ipairs(ARGV) do
    table.insert(all_keys, key)
    local members = redis.call("SMEMBERS", key)
    for _, member in ipairs(members) do
        table.insert(all_keys, member)
    end
end
local deleted = 0
for i = 1, #all_keys, 5000 do
    local last = math.min(i + 4999, #all_keys)
    deleted = deleted + redis.call("DEL", (unpack or table.unpack)(all_keys, i, last))
end
return deleted
""",
    key_count=0,
)

LOCK_ACQUIRE_SCRIPT = Script(
    name=LOCK_ACQUIRE,
    source="""
local v = redis.call("GET", KEYS[1])
if v == false then
    return redis.call("SET", KEYS[1], ARGV[1], "NX", "EX", ARGV[2]) and 1
elseif v == ARGV[1] then
    return redis.call("SET", KEYS[1], ARGV[1], "EX", ARGV[2]) and 1
else
    return 0
end
""",
    key_count=1,
)

LOCK_RELEASE_SCRIPT = Script(
    name=LOCK_RELEASE,
    source="""
local v = redis.call("GET", KEYS[1])
if v == false then
    return 1
elseif v == ARGV[1] then
    return redis.call("DEL", KEYS[1])
else
    return 0
end
""",
    key_count=1,
)

DEFAULT_SCRIPTS: tuple[Script, ...] = (
    KILL_BY_DEPENDENCY_SCRIPT,
    LOCK_ACQUIRE_SCRIPT,
    LOCK_RELEASE_SCRIPT,
)


class _Slot:
    """Digest cache entry for one script.

    ``generation`` moves forward on every publish so that callers racing on
    ``NOSCRIPT`` reload once and the rest reuse the fresh digest.
    """

    __slots__ = ("script", "digest", "generation", "lock")

    def __init__(self, script: Script) -> None:
        self.script = script
        self.digest: str | None = None
        self.generation = 0
        self.lock = asyncio.Lock()


class ScriptRegistry:
    """Name → ``{source, digest}`` map shared by every connection of one pool."""

    def __init__(self, scripts: Iterable[Script] = DEFAULT_SCRIPTS) -> None:
        self._slots: dict[str, _Slot] = {s.name: _Slot(s) for s in scripts}

    def __contains__(self, name: str) -> bool:
        return name in self._slots

    @property
    def names(self) -> list[str]:
        return list(self._slots)

    def script(self, name: str) -> Script:
        return self._slot(name).script

    def digest(self, name: str) -> str | None:
        """Digest published for *name*, or ``None`` when not loaded yet."""
        slot = self._slots.get(name)
        return slot.digest if slot else None

    def is_loaded(self, name: str) -> bool:
        return self.digest(name) is not None

    async def warm_up(self, conn: RedisConnection) -> None:
        """Load every known script and publish its digest."""
        for slot in self._slots.values():
            await self._load(conn, slot, seen_generation=slot.generation)
        logger.info("scripts_loaded", scripts=self.names)

    async def load(self, conn: RedisConnection, name: str) -> str:
        slot = self._slot(name)
        return await self._load(conn, slot, seen_generation=slot.generation)

    async def invoke(
        self,
        conn: RedisConnection,
        name: str,
        keys: Sequence[Any] = (),
        args: Sequence[Any] = (),
    ) -> Any:
        """Run *name* by digest, loading it first if needed and re-loading once on ``NOSCRIPT``."""
        slot = self._slot(name)
        if len(keys) != slot.script.key_count:
            raise ValidationError(
                f"script '{name}' takes {slot.script.key_count} key(s), got {len(keys)}",
                field="keys",
            )
        generation = slot.generation
        digest = slot.digest
        if digest is None:
            digest = await self._load(conn, slot, seen_generation=generation)
            generation = slot.generation
        try:
            return await conn.do(commands.EVALSHA, digest, len(keys), *keys, *args)
        except NoScriptError:
            logger.warning("script_missing_reloading", script=name)

        digest = await self._load(conn, slot, seen_generation=generation)
        try:
            return await conn.do(commands.EVALSHA, digest, len(keys), *keys, *args)
        except NoScriptError as exc:
            raise ScriptError(name, cause=exc) from exc

    def _slot(self, name: str) -> _Slot:
        try:
            return self._slots[name]
        except KeyError:
            raise ScriptError(name, f"unknown script '{name}'") from None

    async def _load(self, conn: RedisConnection, slot: _Slot, *, seen_generation: int) -> str:
        async with slot.lock:
            # Someone else published after our attempt: trust their load.
            if slot.generation != seen_generation and slot.digest is not None:
                return slot.digest
            digest = to_str(await conn.do(commands.SCRIPT, commands.LOAD, slot.script.source))
            if digest != slot.script.digest:
                logger.warning(
                    "script_digest_mismatch",
                    script=slot.script.name,
                    expected=slot.script.digest,
                    received=digest,
                )
            slot.digest = digest
            slot.generation += 1
            return digest


__all__ = [
    "DEFAULT_SCRIPTS",
    "KILL_BY_DEPENDENCY",
    "KILL_BY_DEPENDENCY_SCRIPT",
    "LOCK_ACQUIRE",
    "LOCK_ACQUIRE_SCRIPT",
    "LOCK_RELEASE",
    "LOCK_RELEASE_SCRIPT",
    "Script",
    "ScriptRegistry",
]
