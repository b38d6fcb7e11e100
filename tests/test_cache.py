"""Tests for the TTL cache"""

from unittest.mock import MagicMock

import pytest
import redis

from mindbridge.cache import MemoryCacheBackend, RedisCacheBackend, TTLCache, build_cache_backend


class TestTTLCache:
    def test_fresh_entry_is_returned(self, cache, clock):
        cache.set("1-2024-06-01", ["a"])
        clock.advance(59)
        assert cache.get("1-2024-06-01") == ["a"]

    def test_entry_expires_at_ttl(self, cache, clock):
        cache.set("1-2024-06-01", ["a"])
        clock.advance(60)
        assert cache.get("1-2024-06-01") is None

    def test_missing_key(self, cache):
        assert cache.get("nope") is None

    def test_set_overwrites_and_restarts_ttl(self, cache, clock):
        cache.set("k", 1)
        clock.advance(50)
        cache.set("k", 2)
        clock.advance(50)
        assert cache.get("k") == 2

    @pytest.mark.asyncio
    async def test_get_or_compute_calls_compute_once_within_ttl(self, cache, clock):
        calls = []

        async def compute():
            calls.append(1)
            return [len(calls)]

        assert await cache.get_or_compute("k", compute) == [1]
        clock.advance(30)
        assert await cache.get_or_compute("k", compute) == [1]
        assert len(calls) == 1

        clock.advance(30)
        assert await cache.get_or_compute("k", compute) == [2]
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_empty_result_is_cached(self, cache):
        calls = []

        async def compute():
            calls.append(1)
            return []

        await cache.get_or_compute("k", compute)
        await cache.get_or_compute("k", compute)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_compute_error_is_not_cached(self, cache):
        async def failing():
            raise RuntimeError("calendar down")

        with pytest.raises(RuntimeError):
            await cache.get_or_compute("k", failing)
        assert cache.get("k") is None


class TestRedisCacheBackend:
    def test_round_trip_uses_setex_with_prefix(self):
        client = MagicMock()
        backend = RedisCacheBackend(client)
        backend.set("1-2024-06-01", {"value": [], "stored_at": 5.0}, 60)

        key, ttl, payload = client.setex.call_args.args
        assert key == "slots:1-2024-06-01"
        assert ttl == 60

        client.get.return_value = payload
        assert backend.get("1-2024-06-01") == {"value": [], "stored_at": 5.0}

    def test_redis_errors_are_treated_as_miss(self):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("down")
        client.setex.side_effect = redis.ConnectionError("down")
        backend = RedisCacheBackend(client)

        backend.set("k", {"value": 1, "stored_at": 0}, 60)
        assert backend.get("k") is None

    def test_build_falls_back_to_memory(self, monkeypatch):
        def unavailable():
            raise redis.ConnectionError("refused")

        monkeypatch.setattr("mindbridge.cache.get_redis_client", unavailable)
        assert isinstance(build_cache_backend("redis"), MemoryCacheBackend)

    def test_ttl_cache_over_redis_backend(self):
        client = MagicMock()
        client.get.return_value = None
        cache = TTLCache(RedisCacheBackend(client), ttl=60, clock=lambda: 100.0)
        assert cache.get("k") is None
