"""Small TTL cache used for hot, rarely-changing reads.

Its one consumer today is the notification gate: every finalize asks
"are review emails on?", and the answer lives in a single settings row
that admins flip a few times a year.  Caching it for SETTINGS_CACHE_TTL
seconds keeps that lookup off the database on the grading path.

Entries only ever leave by TTL.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from grading_service.db.redis import redis_pool


@runtime_checkable
class CacheService(Protocol):
    async def get(self, key: str) -> str | None:
        """Fetch a cached value.  Returns None on cache miss."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value with a TTL (time to live)."""
        ...


class InMemoryCacheService:
    """Process-local cache for tests and single-instance dev runs.

    TTLs are accepted but not enforced; the autouse fixture in
    conftest.py clears the store between tests.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = value


class RedisCacheService:
    """Redis-backed cache shared by every API instance."""

    _PREFIX = "cache:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{key}")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.setex(f"{self._PREFIX}{key}", ttl_seconds, value)


if redis_pool is not None:
    cache_service: CacheService = RedisCacheService(redis_pool)
else:
    cache_service = InMemoryCacheService()
