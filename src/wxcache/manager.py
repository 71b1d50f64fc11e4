"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

TTL cache manager: the public store API over a selected backend.

Every public operation degrades instead of raising: failures are logged and
turned into ``None`` / ``False`` / ``[]`` so a cache problem always falls
through to a real fetch.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Iterable, Mapping, Sequence

from .backends.base import CacheBackend
from .codec import CacheCodec, JSONCodec
from .keys import KeyEncoder
from .metrics import CacheMetrics, NoOpCacheMetrics
from .types import CacheLookup, CacheStats, JSONValue, KeyLike

logger = logging.getLogger("wxcache.manager")

DEFAULT_TTL_S = 300.0


class CacheManager:
    """
    TTL key-value store with namespaced keys and maintenance helpers.

    Args:
        backend: Storage backend chosen by ``BackendSelector``.
        encoder: Key encoder; defaults to the ``weather_app`` prefix.
        codec: Serialize/deserialize boundary; JSON by default.
        default_ttl_s: TTL used when ``set`` gets none, and always by ``incr``.
        metrics: Counter sink for hits, misses, and errors.
    """

    def __init__(
        self,
        backend: CacheBackend,
        *,
        encoder: KeyEncoder | None = None,
        codec: CacheCodec | None = None,
        default_ttl_s: float = DEFAULT_TTL_S,
        metrics: CacheMetrics | None = None,
    ) -> None:
        self._backend = backend
        self._encoder = encoder or KeyEncoder()
        self._codec: CacheCodec = codec or JSONCodec()
        self._default_ttl_s = default_ttl_s
        self._metrics: CacheMetrics = metrics or NoOpCacheMetrics()
        self._key_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._hits = 0
        self._misses = 0
        self._errors = 0

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    @property
    def backend_type(self) -> str:
        return self._backend.backend_id

    @property
    def encoder(self) -> KeyEncoder:
        return self._encoder

    @property
    def default_ttl_s(self) -> float:
        return self._default_ttl_s

    def _emit(self, name: str, value: int = 1, *, tags: dict[str, str] | None = None) -> None:
        try:
            self._metrics.incr(name, value, tags=tags)
        except Exception:
            logger.exception("Cache metric %s could not be recorded", name)

    def _record_error(self, op: str) -> None:
        self._errors += 1
        self._emit("cache_errors_total", tags={"op": op})

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._key_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[key] = lock
        return lock

    # ------------------------------------------------------------------
    # Core TTL operations
    # ------------------------------------------------------------------

    async def set(self, key: KeyLike, value: JSONValue, ttl_s: float | None = None) -> bool:
        """Store ``value`` under ``key`` for ``ttl_s`` seconds (default TTL if None)."""
        cache_key = self._encoder.resolve(key)
        ttl = self._default_ttl_s if ttl_s is None else ttl_s
        try:
            blob = self._codec.dumps(value)
            await self._backend.set(cache_key, blob, ttl_s=ttl)
        except Exception:
            logger.exception("Cache SET failed for %s", cache_key)
            self._record_error("set")
            return False
        self._emit("cache_sets_total")
        logger.debug("Cache SET: %s (TTL: %ss)", cache_key, ttl)
        return True

    async def lookup(self, key: KeyLike) -> CacheLookup:
        """Read ``key`` and report hit, miss, or error explicitly."""
        cache_key = self._encoder.resolve(key)
        try:
            raw = await self._backend.get(cache_key)
            if raw is None:
                self._misses += 1
                self._emit("cache_misses_total")
                return CacheLookup.missing()
            value = self._codec.loads(raw)
        except Exception as exc:
            logger.exception("Cache GET failed for %s", cache_key)
            self._record_error("get")
            return CacheLookup.failed(exc)
        self._hits += 1
        self._emit("cache_hits_total")
        logger.debug("Cache HIT: %s", cache_key)
        return CacheLookup.found(value)

    async def get(self, key: KeyLike) -> JSONValue | None:
        """Return the cached value, or None when absent, expired, or unreadable."""
        result = await self.lookup(key)
        return result.value if result.hit else None

    async def delete(self, key: KeyLike) -> bool:
        """Remove ``key``; True means the removal was attempted successfully."""
        cache_key = self._encoder.resolve(key)
        try:
            await self._backend.delete(cache_key)
        except Exception:
            logger.exception("Cache DELETE failed for %s", cache_key)
            self._record_error("delete")
            return False
        logger.debug("Cache DELETE: %s", cache_key)
        return True

    async def exists(self, key: KeyLike) -> bool:
        cache_key = self._encoder.resolve(key)
        try:
            return await self._backend.exists(cache_key)
        except Exception:
            logger.exception("Cache EXISTS failed for %s", cache_key)
            self._record_error("exists")
            return False

    async def clear(self) -> bool:
        """Drop every entry held by the backend."""
        try:
            await self._backend.clear()
        except Exception:
            logger.exception("Cache CLEAR failed")
            self._record_error("clear")
            return False
        logger.info("Cache cleared (backend=%s)", self.backend_type)
        return True

    # ------------------------------------------------------------------
    # Maintenance operations
    # ------------------------------------------------------------------

    async def stats(self) -> CacheStats | None:
        """Backend snapshot merged with this manager's hit/miss/error tallies."""
        try:
            snapshot = await self._backend.stats()
        except Exception:
            logger.exception("Cache STATS failed")
            self._record_error("stats")
            return None
        return CacheStats(
            type=snapshot.type,
            total_entries=snapshot.total_entries,
            valid_entries=snapshot.valid_entries,
            expired_entries=snapshot.expired_entries,
            memory_usage_bytes=snapshot.memory_usage_bytes,
            hits=self._hits,
            misses=self._misses,
            errors=self._errors,
            info=snapshot.info,
        )

    async def mget(self, keys: Iterable[str]) -> dict[str, JSONValue | None]:
        """Sequential ``get`` over ``keys``; not atomic across keys."""
        results: dict[str, JSONValue | None] = {}
        for key in keys:
            results[key] = await self.get(key)
        return results

    async def mset(
        self,
        pairs: Mapping[str, JSONValue],
        ttl_s: float | None = None,
    ) -> dict[str, bool]:
        """Sequential ``set`` over ``pairs``; not atomic across keys."""
        results: dict[str, bool] = {}
        for key, value in pairs.items():
            results[key] = await self.set(key, value, ttl_s)
        return results

    async def keys(self, pattern: str) -> list[str]:
        """
        List stored keys matching a glob where ``*`` matches anything.

        The pattern must match the whole key; other characters are literal.
        """
        try:
            return await self._backend.keys(pattern)
        except Exception:
            logger.exception("Cache KEYS failed for pattern %s", pattern)
            self._record_error("keys")
            return []

    async def incr(self, key: KeyLike, amount: int | float = 1) -> int | float | None:
        """
        Add ``amount`` to a numeric entry, treating absent as 0.

        The result is stored with the default TTL, replacing any custom TTL
        the key had. Returns None when the current value is not numeric.
        """
        cache_key = self._encoder.resolve(key)
        async with self._lock_for(cache_key):
            current = await self.lookup(cache_key)
            if current.status == "error":
                return None
            base = current.value if current.hit and current.value is not None else 0
            if isinstance(base, bool) or not isinstance(base, (int, float)):
                logger.error(
                    "Cache INCR on non-numeric value for %s (%s)",
                    cache_key,
                    type(base).__name__,
                )
                self._record_error("incr")
                return None
            new_value = base + amount
            await self.set(cache_key, new_value)
            return new_value

    async def expire(self, key: KeyLike, ttl_s: float) -> bool:
        """Re-store the current value with a new TTL; False if the key is absent."""
        cache_key = self._encoder.resolve(key)
        async with self._lock_for(cache_key):
            current = await self.lookup(cache_key)
            if not current.hit:
                return False
            return await self.set(cache_key, current.value, ttl_s)

    async def purge_expired(self) -> int:
        """Evict every expired row now; returns how many were removed."""
        try:
            removed = await self._backend.purge_expired()
        except Exception:
            logger.exception("Cache PURGE failed")
            self._record_error("purge")
            return 0
        if removed:
            self._emit("cache_evictions_total", removed)
            logger.debug("Cache PURGE removed %d expired entries", removed)
        return removed

    async def namespace_counts(self, namespaces: Sequence[str]) -> dict[str, int]:
        """Number of stored keys per namespace under this manager's prefix."""
        counts: dict[str, int] = {}
        for namespace in namespaces:
            counts[namespace] = len(await self.keys(self._encoder.namespace_pattern(namespace)))
        return counts

    async def close(self) -> None:
        try:
            await self._backend.close()
        except Exception:
            logger.exception("Cache backend close failed")
