"""
TTL caching utilities for computed availability
Backends are pluggable: in-process memory (default, tests) or Redis (shared across workers)
"""
import json
import logging
import time
from typing import Any, Awaitable, Callable, Optional

import redis

from .config import CACHE_BACKEND, REDIS_URL, SLOTS_CACHE_TTL

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client from REDIS_URL
    Raises if the server cannot be reached
    """
    global redis_client

    if redis_client is None:
        if not REDIS_URL:
            raise RuntimeError("REDIS_URL is not configured")

        # Mask password in URL for logging
        if "@" in REDIS_URL:
            url_parts = REDIS_URL.split("@")
            protocol = url_parts[0].split(":")[0]
            masked_url = f"{protocol}:****@{url_parts[1]}"
        else:
            masked_url = "****"
        logger.info(f"Using Redis URL connection: {masked_url}")

        client = redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        client.ping()
        redis_client = client
        logger.info("Redis connected successfully via URL")

    return redis_client


class MemoryCacheBackend:
    """Process-local dict storage. Entries are only ever overwritten, never evicted."""

    def __init__(self):
        self._entries: dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        return self._entries.get(key)

    def set(self, key: str, entry: dict, ttl: int) -> None:
        self._entries[key] = entry

    def clear(self) -> None:
        self._entries.clear()


class RedisCacheBackend:
    """Redis storage with JSON serialization; Redis expires keys on its own after the TTL"""

    def __init__(self, client: redis.Redis, prefix: str = "slots"):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Optional[dict]:
        try:
            value = self.client.get(self._key(key))
            if value:
                logger.debug(f"Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"Cache MISS: {key}")
            return None
        except redis.RedisError as e:
            logger.error(f"Cache get error for {key}: {e}")
            return None

    def set(self, key: str, entry: dict, ttl: int) -> None:
        try:
            self.client.setex(self._key(key), ttl, json.dumps(entry))
            logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
        except redis.RedisError as e:
            logger.error(f"Cache set error for {key}: {e}")


class TTLCache:
    """
    Time-bounded memoization over a storage backend.

    An entry older than ``ttl`` seconds is treated as absent. Values must be
    JSON-serializable so that any backend can hold them.
    """

    def __init__(self, backend, ttl: int = SLOTS_CACHE_TTL, clock: Callable[[], float] = time.time):
        self.backend = backend
        self.ttl = ttl
        self.clock = clock

    def get(self, key: str) -> Optional[Any]:
        entry = self.backend.get(key)
        if entry is None:
            return None
        if self.clock() - entry["stored_at"] >= self.ttl:
            return None
        return entry["value"]

    def set(self, key: str, value: Any) -> None:
        self.backend.set(key, {"value": value, "stored_at": self.clock()}, self.ttl)

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        """Return the fresh cached value for key, or await compute() and store its result"""
        cached = self.get(key)
        if cached is not None:
            return cached

        value = await compute()
        self.set(key, value)
        return value


def build_cache_backend(kind: str = CACHE_BACKEND):
    """Build the configured backend, falling back to memory when Redis is unreachable"""
    if kind == "redis":
        try:
            return RedisCacheBackend(get_redis_client())
        except (redis.RedisError, RuntimeError) as e:
            logger.warning(f"Redis cache unavailable, using in-memory cache: {e}")
    return MemoryCacheBackend()


# Global availability cache instance
availability_cache = TTLCache(build_cache_backend(), ttl=SLOTS_CACHE_TTL)
