"""Unit tests for the script registry."""
from __future__ import annotations

import asyncio
import hashlib
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from depcache.adapters.redis.connection import RedisConnection
from depcache.adapters.redis.dialer import Dialer
from depcache.adapters.redis.scripts import (
    DEFAULT_SCRIPTS,
    KILL_BY_DEPENDENCY,
    LOCK_ACQUIRE,
    LOCK_RELEASE,
    Script,
    ScriptRegistry,
)
from depcache.config.url import RedisURL
from depcache.kernel.errors import NoScriptError, ScriptError, ValidationError
from depcache.testing.fakes import FAKE_URL, fake_dial_options

ECHO = Script(name="echo", source="return ARGV[1]", key_count=0)


async def _dial(server: Any) -> RedisConnection:
    return await Dialer(RedisURL.parse(FAKE_URL), fake_dial_options(server))()


class TestScript:
    def test_digest_is_sha1_of_source(self) -> None:
        assert ECHO.digest == hashlib.sha1(b"return ARGV[1]").hexdigest()

    def test_default_scripts(self) -> None:
        assert {s.name for s in DEFAULT_SCRIPTS} == {KILL_BY_DEPENDENCY, LOCK_ACQUIRE, LOCK_RELEASE}


class TestScriptRegistry:
    def test_warm_up_publishes_every_digest(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            registry = ScriptRegistry()
            assert not any(registry.is_loaded(name) for name in registry.names)
            conn = await _dial(fake_redis_server)
            await registry.warm_up(conn)
            for script in DEFAULT_SCRIPTS:
                assert registry.digest(script.name) == script.digest
            await conn.close()

        asyncio.run(run())

    def test_invoke_loads_lazily(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            registry = ScriptRegistry([ECHO])
            conn = await _dial(fake_redis_server)
            assert await registry.invoke(conn, "echo", args=["hi"]) == b"hi"
            assert registry.is_loaded("echo")
            await conn.close()

        asyncio.run(run())

    def test_invoke_reloads_after_script_flush(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            registry = ScriptRegistry([ECHO])
            conn = await _dial(fake_redis_server)
            await registry.warm_up(conn)
            await conn.do("SCRIPT", "FLUSH")
            assert await registry.invoke(conn, "echo", args=["again"]) == b"again"
            assert conn.reusable
            await conn.close()

        asyncio.run(run())

    def test_second_noscript_is_script_error(self) -> None:
        async def run() -> None:
            calls: list[str] = []

            async def do(command: str, *args: Any) -> Any:
                calls.append(command)
                if command == "SCRIPT":
                    return ECHO.digest.encode()
                raise NoScriptError("NOSCRIPT No matching script")

            conn = MagicMock()
            conn.do = AsyncMock(side_effect=do)
            registry = ScriptRegistry([ECHO])
            with pytest.raises(ScriptError):
                await registry.invoke(conn, "echo", args=["x"])
            assert calls == ["SCRIPT", "EVALSHA", "SCRIPT", "EVALSHA"]

        asyncio.run(run())

    def test_concurrent_noscript_reloads_once(self) -> None:
        async def run() -> None:
            loads = 0
            flushed = True

            async def do(command: str, *args: Any) -> Any:
                nonlocal loads, flushed
                if command == "SCRIPT":
                    loads += 1
                    await asyncio.sleep(0)
                    flushed = False
                    return ECHO.digest.encode()
                if flushed:
                    raise NoScriptError("NOSCRIPT No matching script")
                return b"ok"

            conn = MagicMock()
            conn.do = AsyncMock(side_effect=do)
            registry = ScriptRegistry([ECHO])
            await registry.load(conn, "echo")
            flushed = True
            loads = 0
            results = await asyncio.gather(*(registry.invoke(conn, "echo") for _ in range(5)))
            assert results == [b"ok"] * 5
            assert loads == 1

        asyncio.run(run())

    def test_unknown_script(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            registry = ScriptRegistry()
            conn = await _dial(fake_redis_server)
            with pytest.raises(ScriptError):
                await registry.invoke(conn, "no-such-script")
            assert "no-such-script" not in registry
            await conn.close()

        asyncio.run(run())

    def test_key_count_is_enforced(self) -> None:
        async def run() -> None:
            conn = MagicMock()
            conn.do = AsyncMock()
            registry = ScriptRegistry()
            with pytest.raises(ValidationError) as excinfo:
                await registry.invoke(conn, LOCK_ACQUIRE, args=["secret", 10])
            assert excinfo.value.field == "keys"
            with pytest.raises(ValidationError):
                await registry.invoke(conn, KILL_BY_DEPENDENCY, keys=["depend:a"])
            conn.do.assert_not_called()

        asyncio.run(run())
