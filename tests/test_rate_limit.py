import dataclasses

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from prio_edge.core import settings as settings_module
from prio_edge.core.rate_limit import (
    AllowAllRateLimitStore,
    InMemoryRateLimitStore,
    RedisRateLimitStore,
    build_rate_limiter,
)

try:
    from fakeredis import aioredis as fakeredis_aioredis
except ImportError:  # pragma: no cover - dependency guarded in tests only
    fakeredis_aioredis = None


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class BrokenRedis:
    async def incr(self, key):
        raise RedisConnectionError("redis is down")

    async def aclose(self):
        return None


def test_in_memory_allows_up_to_limit_then_blocks():
    store = InMemoryRateLimitStore(clock=FakeClock())
    results = [store.hit("203.0.113.7") for _ in range(1000)]
    assert all(results)
    assert store.hit("203.0.113.7") is False
    assert store.get("203.0.113.7").count == 1001


def test_in_memory_keys_are_isolated():
    store = InMemoryRateLimitStore(limit=1, clock=FakeClock())
    assert store.hit("198.51.100.1") is True
    assert store.hit("198.51.100.1") is False
    assert store.hit("198.51.100.2") is True


def test_in_memory_window_resets_after_expiry():
    clock = FakeClock()
    store = InMemoryRateLimitStore(limit=2, window_seconds=60, clock=clock)
    assert store.hit("ip") is True
    assert store.hit("ip") is True
    assert store.hit("ip") is False

    clock.advance(60)
    # reset_at itself is still inside the window
    assert store.hit("ip") is False

    clock.advance(0.001)
    assert store.hit("ip") is True
    assert store.get("ip").count == 1


def test_in_memory_cleanup_prunes_only_expired_records():
    clock = FakeClock()
    store = InMemoryRateLimitStore(limit=5, window_seconds=10, cleanup_threshold=3, clock=clock)
    for key in ("a", "b", "c"):
        store.hit(key)
    assert len(store) == 3

    clock.advance(11)
    store.hit("d")
    assert len(store) == 1
    assert store.get("d") is not None
    assert store.get("a") is None


def test_in_memory_empty_key_is_not_limited():
    store = InMemoryRateLimitStore(limit=1, clock=FakeClock())
    assert all(store.hit("") for _ in range(5))
    assert len(store) == 0


@pytest.mark.asyncio
async def test_redis_store_counts_per_window():
    if fakeredis_aioredis is None:
        pytest.skip("fakeredis is not installed")
    client = fakeredis_aioredis.FakeRedis()
    store = RedisRateLimitStore(client, limit=3, window_seconds=60)
    try:
        assert [await store.allow("203.0.113.9") for _ in range(3)] == [True, True, True]
        assert await store.allow("203.0.113.9") is False
        assert await store.allow("203.0.113.10") is True

        ttl = await client.pttl("ratelimit:203.0.113.9")
        assert 0 < ttl <= 60_000
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_redis_store_repairs_missing_ttl():
    if fakeredis_aioredis is None:
        pytest.skip("fakeredis is not installed")
    client = fakeredis_aioredis.FakeRedis()
    await client.set("ratelimit:ip", 5)
    store = RedisRateLimitStore(client, limit=10, window_seconds=30)
    try:
        assert await store.allow("ip") is True
        assert await client.pttl("ratelimit:ip") > 0
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_redis_store_fails_open():
    store = RedisRateLimitStore(BrokenRedis(), limit=1)
    assert await store.allow("ip") is True
    assert await store.allow("ip") is True


def _settings(**overrides):
    return dataclasses.replace(settings_module.get_settings(), **overrides)


def test_build_rate_limiter_disabled():
    assert isinstance(build_rate_limiter(_settings(rate_limit_enabled=False)), AllowAllRateLimitStore)


def test_build_rate_limiter_in_memory_uses_settings():
    store = build_rate_limiter(_settings(rate_limit=25, rate_window_seconds=5.0))
    assert isinstance(store, InMemoryRateLimitStore)
    assert store.limit == 25
    assert store.window_seconds == 5.0


def test_build_rate_limiter_with_redis_url():
    store = build_rate_limiter(_settings(rate_limit_redis_url="redis://localhost:6379/3"))
    assert isinstance(store, RedisRateLimitStore)
