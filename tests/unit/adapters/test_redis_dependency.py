"""Unit tests for dependency tags: linking and kill-by-dependency."""
from __future__ import annotations

import asyncio

from hypothesis import given, settings

from depcache.adapters.redis import RedisCache, connect
from depcache.adapters.redis.dependency import dependency_key
from depcache.adapters.redis.dialer import DialOptions
from depcache.testing.fakes import FAKE_URL, fake_dial_options, fake_server
from depcache.testing.generators import tag_map_strategy


async def _connect(options: DialOptions) -> RedisCache:
    return await connect(FAKE_URL, max_idle_connections=2, dependency_mode=True, dial_options=options)


class TestDependencyKey:
    def test_prefix(self) -> None:
        assert dependency_key("user-23") == "depend:user-23"


class TestKillByDependency:
    def test_tag_invalidation(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.set("user-michael", "profile", "user-23", "user-profile-23")
                assert await cache.set_members("depend:user-23") == ["user-michael"]
                assert await cache.set_members("depend:user-profile-23") == ["user-michael"]

                assert await cache.kill_by_dependency("user-23") == 2
                assert not await cache.exists("user-michael")
                assert not await cache.exists("depend:user-23")
                # stale reference survives in the other index
                assert await cache.set_is_member("depend:user-profile-23", "user-michael")

                assert await cache.kill_by_dependency("user-profile-23") == 1
                assert not await cache.exists("depend:user-profile-23")

        asyncio.run(run())

    def test_partial_tag_kill_leaves_stale_reference(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.set("k", "v1", "a", "b")
                await cache.kill_by_dependency("a")
                assert not await cache.exists("k")
                assert await cache.set_members("depend:b") == ["k"]

                await cache.set("k", "v2")
                assert not await cache.exists("depend:a")
                assert await cache.set_members("depend:b") == ["k"]

        asyncio.run(run())

    def test_bulk_kill_counts_primaries_and_index(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.set("one", "1", "a")
                await cache.set("two", "2", "a")
                assert await cache.kill_by_dependency("a") == 3

        asyncio.run(run())

    def test_unknown_tag_kills_nothing(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.set("survivor", "x")
                assert await cache.kill_by_dependency("nobody") == 0
                assert await cache.exists("survivor")

        asyncio.run(run())

    def test_empty_input_is_noop(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                assert await cache.kill_by_dependency() == 0
                assert await cache.delete() == 0

        asyncio.run(run())

    def test_key_named_like_tag_is_removed_but_not_counted(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.set("products", "listing")
                await cache.set("product:1", "p1", "products")
                assert await cache.kill_by_dependency("products") == 2
                assert not await cache.exists("products")
                assert not await cache.exists("product:1")

        asyncio.run(run())

    def test_large_tag_index(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            keys = [f"item:{i}" for i in range(10_000)]
            async with await _connect(fake_dial_options) as cache:
                async with cache.connection() as conn:
                    await conn.do("MSET", *(part for key in keys for part in (key, "x")))
                await cache.set_add_many("depend:big", *keys)
                assert await cache.kill_by_dependency("big") == 10_001
                assert not await cache.exists("item:0")
                assert not await cache.exists("item:9999")
                assert not await cache.exists("depend:big")

        asyncio.run(run())

    def test_delete_is_alias(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.set("k", "v", "t")
                assert await cache.delete("t") == 2
                assert not await cache.exists("k")

        asyncio.run(run())

    def test_hash_and_set_writes_link_the_container(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.hash_set("h", "f", "v", "t")
                await cache.hash_map_set("hm", {"a": 1}, "t")
                await cache.set_add("s", "m", "t")
                assert sorted(await cache.set_members("depend:t")) == ["h", "hm", "s"]
                assert await cache.kill_by_dependency("t") == 4
                for key in ("h", "hm", "s"):
                    assert not await cache.exists(key)

        asyncio.run(run())

    def test_link_survives_pipelined_transaction(self, fake_dial_options: DialOptions) -> None:
        async def run() -> None:
            async with await _connect(fake_dial_options) as cache:
                await cache.set("k", "v", "t1", "t2", "t3")
                for tag in ("t1", "t2", "t3"):
                    assert await cache.set_is_member(dependency_key(tag), "k")
                assert cache.stats.in_use == 0

        asyncio.run(run())


class TestKillByDependencyProperties:
    @settings(max_examples=25, deadline=None)
    @given(tag_map_strategy())
    def test_every_tagged_key_is_gone_after_killing_its_tags(self, tagged: dict[str, list[str]]) -> None:
        async def run() -> None:
            options = fake_dial_options(fake_server())
            async with await _connect(options) as cache:
                for key, tags in tagged.items():
                    await cache.set(key, "v", *tags)
                all_tags = sorted({tag for tags in tagged.values() for tag in tags})
                await cache.kill_by_dependency(*all_tags)
                for key in tagged:
                    assert not await cache.exists(key)
                for tag in all_tags:
                    assert not await cache.exists(dependency_key(tag))

        asyncio.run(run())
