"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: backends/redis.py.
"""

from __future__ import annotations

import logging
from typing import Any

from ..types import CacheStats
from .base import CacheBackend, escape_redis_glob

logger = logging.getLogger("wxcache.backends.redis")


class RedisCacheBackend(CacheBackend):
    """
    Redis-backed cache backend for multi-process deployments.

    Expiry is enforced natively by Redis (``SET ... PX``), so no sweep runs
    on this path.

    Requires ``redis.asyncio`` (``pip install redis``).

    Args:
        redis: An ``redis.asyncio.Redis`` client instance.
    """

    backend_id = "redis"

    def __init__(self, redis: Any) -> None:
        self._redis = redis

    @staticmethod
    def _decode(raw: str | bytes) -> str:
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return str(raw)

    async def ping(self) -> bool:
        return bool(await self._redis.ping())

    async def get(self, key: str) -> str | None:
        raw = await self._redis.get(key)
        if raw is None:
            return None
        return self._decode(raw)

    async def set(self, key: str, value: str, *, ttl_s: float) -> None:
        ttl_ms = int(ttl_s * 1000)
        if ttl_ms <= 0:
            # Already expired on arrival; Redis rejects non-positive PX.
            await self._redis.delete(key)
            return
        await self._redis.set(key, value, px=ttl_ms)

    async def delete(self, key: str) -> None:
        await self._redis.delete(key)

    async def exists(self, key: str) -> bool:
        return int(await self._redis.exists(key)) > 0

    async def clear(self) -> None:
        await self._redis.flushdb()

    async def keys(self, pattern: str) -> list[str]:
        rows = await self._redis.keys(escape_redis_glob(pattern))
        return [self._decode(row) for row in rows]

    async def stats(self) -> CacheStats:
        info = await self._redis.info("memory")
        total = int(await self._redis.dbsize())
        used = info.get("used_memory", 0) if isinstance(info, dict) else 0
        return CacheStats(
            type="redis",
            total_entries=total,
            valid_entries=total,
            memory_usage_bytes=int(used or 0),
            info=dict(info) if isinstance(info, dict) else {"raw": info},
        )

    async def purge_expired(self) -> int:
        return 0

    async def close(self) -> None:
        closer = getattr(self._redis, "aclose", None) or getattr(self._redis, "close", None)
        if closer is None:
            return
        await closer()
        logger.debug("Redis cache connection closed")
