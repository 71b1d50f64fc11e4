"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Backend selection and cache construction helpers.

Selection runs once per process: the remote backend is tried a single time
with a bounded ping, and any failure settles on the in-memory table for the
rest of the process lifetime.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from .backends.base import CacheBackend
from .backends.inmemory import InMemoryCacheBackend
from .backends.redis import RedisCacheBackend
from .errors import CacheBackendError
from .keys import KeyEncoder
from .manager import CacheManager
from .metrics import CacheMetrics, create_cache_metrics
from .settings import CacheSettings

logger = logging.getLogger("wxcache.selector")


class BackendSelector:
    """
    Chooses between the Redis and in-memory backends exactly once.

    Args:
        settings: Backend mode, Redis location, and connect timeout.
        redis_client: Pre-built ``redis.asyncio`` client; skips URL handling.
        clock: Time source handed to the in-memory backend.
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        *,
        redis_client: Any | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings or CacheSettings()
        self._redis_client = redis_client
        self._clock = clock
        self._backend: CacheBackend | None = None
        self._redis_available = False

    @property
    def redis_available(self) -> bool:
        return self._redis_available

    @property
    def backend(self) -> CacheBackend | None:
        """Chosen backend, or None before ``initialize`` ran."""
        return self._backend

    def _should_try_redis(self) -> bool:
        mode = self._settings.backend
        if mode == "memory":
            return False
        if mode == "redis":
            return True
        return self._redis_client is not None or self._settings.redis_configured

    def _build_redis_client(self) -> Any:
        if self._redis_client is not None:
            return self._redis_client
        import redis.asyncio as redis

        return redis.Redis.from_url(
            self._settings.redis_dsn(),
            socket_connect_timeout=self._settings.connect_timeout_s,
        )

    async def _connect_redis(self) -> RedisCacheBackend:
        backend = RedisCacheBackend(self._build_redis_client())
        acknowledged = await asyncio.wait_for(
            backend.ping(), timeout=self._settings.connect_timeout_s
        )
        if not acknowledged:
            raise CacheBackendError("Redis PING was not acknowledged")
        return backend

    async def initialize(self) -> CacheBackend:
        """
        Pick the backend; never raises.

        Later calls return the backend chosen by the first call.
        """
        if self._backend is not None:
            return self._backend

        if self._should_try_redis():
            logger.info("Attempting to connect to Redis cache backend")
            try:
                self._backend = await self._connect_redis()
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Redis not available (%s: %s), using memory cache",
                    type(exc).__name__,
                    exc,
                )
            else:
                self._redis_available = True
                logger.info("Using Redis cache backend")
                return self._backend

        self._redis_available = False
        self._backend = InMemoryCacheBackend(clock=self._clock)
        logger.info("Using in-memory cache backend")
        return self._backend


async def create_cache(
    settings: CacheSettings | None = None,
    *,
    redis_client: Any | None = None,
    metrics: CacheMetrics | None = None,
    clock: Callable[[], float] = time.time,
) -> CacheManager:
    """Select a backend and wrap it in a ready-to-use ``CacheManager``."""
    settings = settings or CacheSettings()
    selector = BackendSelector(settings, redis_client=redis_client, clock=clock)
    backend = await selector.initialize()
    return CacheManager(
        backend,
        encoder=KeyEncoder(settings.key_prefix),
        default_ttl_s=settings.default_ttl_s,
        metrics=metrics or create_cache_metrics(settings.metrics),
    )


async def create_cache_from_env(
    *,
    redis_client: Any | None = None,
    metrics: CacheMetrics | None = None,
) -> CacheManager:
    """
    Create a cache manager from `WXCACHE_*` environment variables.

    Backends:
    - `auto` (default): Redis when a URL/host is configured, else memory
    - `memory`
    - `redis`: falls back to memory when Redis cannot be reached
    """
    return await create_cache(
        CacheSettings.from_env(),
        redis_client=redis_client,
        metrics=metrics,
    )
