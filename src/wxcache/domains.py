"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Domain wrappers that fix a namespace and default TTL per data category.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from .keys import normalize_identifier
from .manager import CacheManager
from .types import CacheKey, JSONValue

V = TypeVar("V")

CACHED_AT_FIELD = "cachedAt"


@dataclass(frozen=True, slots=True)
class DomainSpec:
    """
    Keying and annotation rules for one data category.

    Attributes:
        namespace: Key namespace segment.
        default_ttl_s: TTL applied when the caller passes none.
        identifier_field: Payload field that records the raw lookup identifier.
        normalize: Whether identifiers are lowercased and underscore-joined.
    """

    namespace: str
    default_ttl_s: float
    identifier_field: str = "location"
    normalize: bool = True


WEATHER = DomainSpec("weather", 600)
FORECAST = DomainSpec("forecast", 1800)
AIR_QUALITY = DomainSpec("air_quality", 900)
# Geocoding results are stable, so they live for a day.
GEOCODING = DomainSpec("geocoding", 86400, identifier_field="query")
USER_PREFS = DomainSpec("user_prefs", 86400, identifier_field="userId", normalize=False)

DOMAINS: tuple[DomainSpec, ...] = (WEATHER, FORECAST, AIR_QUALITY, GEOCODING, USER_PREFS)
LOCATION_DOMAINS: tuple[DomainSpec, ...] = (WEATHER, FORECAST, AIR_QUALITY)


def _now_ms() -> int:
    return int(time.time() * 1000)


class DomainCache(Generic[V]):
    """Typed view of the store for one ``DomainSpec``."""

    def __init__(
        self,
        manager: CacheManager,
        spec: DomainSpec,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._manager = manager
        self._spec = spec
        self._clock = clock

    @property
    def spec(self) -> DomainSpec:
        return self._spec

    def key_for(self, identifier: str) -> CacheKey:
        ident = normalize_identifier(identifier) if self._spec.normalize else identifier
        return CacheKey(self._spec.namespace, ident)

    def _annotate(self, identifier: str, data: V) -> JSONValue:
        if not isinstance(data, Mapping):
            return cast(JSONValue, data)
        return {
            **cast(Mapping[str, Any], data),
            CACHED_AT_FIELD: self._clock(),
            self._spec.identifier_field: identifier,
        }

    async def set(self, identifier: str, data: V, ttl_s: float | None = None) -> bool:
        ttl = self._spec.default_ttl_s if ttl_s is None else ttl_s
        return await self._manager.set(
            self.key_for(identifier), self._annotate(identifier, data), ttl
        )

    async def get(self, identifier: str) -> V | None:
        return cast("V | None", await self._manager.get(self.key_for(identifier)))

    async def delete(self, identifier: str) -> bool:
        return await self._manager.delete(self.key_for(identifier))

    async def exists(self, identifier: str) -> bool:
        return await self._manager.exists(self.key_for(identifier))

    async def get_or_fetch(
        self,
        identifier: str,
        fetch: Callable[[], Awaitable[V]],
        ttl_s: float | None = None,
    ) -> V:
        """
        Cache-aside read: return the cached value or fetch and store it.

        A miss returns the fetched value in the same annotated shape a later
        hit would; errors raised by ``fetch`` propagate to the caller.
        """
        cached = await self.get(identifier)
        if cached is not None:
            return cached
        stored = self._annotate(identifier, await fetch())
        ttl = self._spec.default_ttl_s if ttl_s is None else ttl_s
        await self._manager.set(self.key_for(identifier), stored, ttl)
        return cast(V, stored)


class WeatherDataCache:
    """Convenience facade bundling every weather-dashboard domain."""

    def __init__(self, manager: CacheManager, *, clock: Callable[[], int] = _now_ms) -> None:
        self._manager = manager
        self.weather: DomainCache[dict[str, Any]] = DomainCache(manager, WEATHER, clock=clock)
        self.forecast: DomainCache[dict[str, Any]] = DomainCache(manager, FORECAST, clock=clock)
        self.air_quality: DomainCache[dict[str, Any]] = DomainCache(
            manager, AIR_QUALITY, clock=clock
        )
        self.geocoding: DomainCache[Any] = DomainCache(manager, GEOCODING, clock=clock)
        self.user_prefs: DomainCache[dict[str, Any]] = DomainCache(
            manager, USER_PREFS, clock=clock
        )

    @property
    def manager(self) -> CacheManager:
        return self._manager

    async def set_weather(self, location: str, data: dict[str, Any], ttl_s: float | None = None) -> bool:
        return await self.weather.set(location, data, ttl_s)

    async def get_weather(self, location: str) -> dict[str, Any] | None:
        return await self.weather.get(location)

    async def set_forecast(self, location: str, data: dict[str, Any], ttl_s: float | None = None) -> bool:
        return await self.forecast.set(location, data, ttl_s)

    async def get_forecast(self, location: str) -> dict[str, Any] | None:
        return await self.forecast.get(location)

    async def set_air_quality(
        self, location: str, data: dict[str, Any], ttl_s: float | None = None
    ) -> bool:
        return await self.air_quality.set(location, data, ttl_s)

    async def get_air_quality(self, location: str) -> dict[str, Any] | None:
        return await self.air_quality.get(location)

    async def set_geocoding(self, query: str, data: Any, ttl_s: float | None = None) -> bool:
        return await self.geocoding.set(query, data, ttl_s)

    async def get_geocoding(self, query: str) -> Any | None:
        return await self.geocoding.get(query)

    async def set_user_prefs(
        self, user_id: str, prefs: dict[str, Any], ttl_s: float | None = None
    ) -> bool:
        return await self.user_prefs.set(user_id, prefs, ttl_s)

    async def get_user_prefs(self, user_id: str) -> dict[str, Any] | None:
        return await self.user_prefs.get(user_id)

    async def clear_location(self, location: str) -> int:
        """Drop weather, forecast, and air-quality entries for one location."""
        removed = 0
        for domain in (self.weather, self.forecast, self.air_quality):
            if await domain.exists(location):
                await domain.delete(location)
                removed += 1
        return removed
