"""Unit tests for the Dialer: in-process server, no running Redis required."""
from __future__ import annotations

import asyncio
from typing import Any

import pytest

from depcache.adapters.redis.dialer import Dialer, DialOptions
from depcache.config.url import RedisURL
from depcache.kernel.errors import ConnectionError, DialError
from depcache.testing.fakes import fake_dial_options


def _dialer(url: str, server: Any) -> Dialer:
    return Dialer(RedisURL.parse(url), fake_dial_options(server))


class TestDialer:
    def test_dial_returns_ready_connection(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            conn = await _dialer("redis://fake:6379", fake_redis_server)()
            assert conn.address == "fake:6379"
            assert conn.reusable
            await conn.ping()
            await conn.close()

        asyncio.run(run())

    def test_select_database_from_url_path(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            db2 = await _dialer("redis://fake:6379/2", fake_redis_server)()
            db0 = await _dialer("redis://fake:6379/0", fake_redis_server)()
            await db2.do("SET", "only-in-2", "x")
            assert await db2.do("EXISTS", "only-in-2") == 1
            assert await db0.do("EXISTS", "only-in-2") == 0
            await db2.close()
            await db0.close()

        asyncio.run(run())

    def test_rejected_auth_is_dial_error(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            with pytest.raises(DialError):
                await _dialer("redis://:wrong@fake:6379", fake_redis_server)()

        asyncio.run(run())

    def test_unreachable_server_is_dial_error(self, fake_redis_server: Any) -> None:
        async def run() -> None:
            fake_redis_server.connected = False
            with pytest.raises(DialError) as exc_info:
                await _dialer("redis://fake:6379", fake_redis_server)()
            assert isinstance(exc_info.value, ConnectionError)
            assert exc_info.value.resource == "fake:6379"

        asyncio.run(run())

    def test_default_options(self) -> None:
        options = DialOptions()
        assert options.connect_timeout == 5.0
        assert options.read_timeout is None
        assert options.keepalive is True
        assert options.connection_class is None
