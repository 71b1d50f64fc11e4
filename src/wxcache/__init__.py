"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

TTL caching layer for weather-dashboard data.

Quick start::

    from wxcache import WeatherDataCache, create_cache_from_env

    manager = await create_cache_from_env()
    cache = WeatherDataCache(manager)

    current = await cache.weather.get_or_fetch("Tokyo", fetch_current_weather)
"""

from .backends import CacheBackend, InMemoryCacheBackend, RedisCacheBackend
from .codec import CacheCodec, JSONCodec
from .domains import (
    AIR_QUALITY,
    DOMAINS,
    FORECAST,
    GEOCODING,
    USER_PREFS,
    WEATHER,
    DomainCache,
    DomainSpec,
    WeatherDataCache,
)
from .errors import CacheBackendError, CacheError, CacheSerializationError
from .janitor import CacheJanitor, JanitorReport
from .keys import DEFAULT_KEY_PREFIX, KeyEncoder, coordinate_identifier, normalize_identifier
from .manager import CacheManager
from .metrics import CacheMetrics, NoOpCacheMetrics, PrometheusCacheMetrics
from .selector import BackendSelector, create_cache, create_cache_from_env
from .settings import CacheSettings
from .types import CacheEntry, CacheKey, CacheLookup, CacheStats, JSONValue

__all__ = [
    "CacheBackend",
    "InMemoryCacheBackend",
    "RedisCacheBackend",
    "CacheCodec",
    "JSONCodec",
    "DomainCache",
    "DomainSpec",
    "WeatherDataCache",
    "WEATHER",
    "FORECAST",
    "AIR_QUALITY",
    "GEOCODING",
    "USER_PREFS",
    "DOMAINS",
    "CacheError",
    "CacheBackendError",
    "CacheSerializationError",
    "CacheJanitor",
    "JanitorReport",
    "DEFAULT_KEY_PREFIX",
    "KeyEncoder",
    "coordinate_identifier",
    "normalize_identifier",
    "CacheManager",
    "CacheMetrics",
    "NoOpCacheMetrics",
    "PrometheusCacheMetrics",
    "BackendSelector",
    "create_cache",
    "create_cache_from_env",
    "CacheSettings",
    "CacheEntry",
    "CacheKey",
    "CacheLookup",
    "CacheStats",
    "JSONValue",
]
