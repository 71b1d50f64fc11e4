"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Core data models shared by cache backends, the manager, and domain wrappers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

BackendType = Literal["memory", "redis"]
LookupStatus = Literal["hit", "miss", "error"]


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Namespace/identifier pair rendered to a string key by ``KeyEncoder``."""

    namespace: str
    identifier: str


KeyLike: TypeAlias = str | CacheKey


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One stored row in the in-memory backend."""

    key: str
    value: str
    expires_at_ms: int

    def is_expired(self, now_ms: int) -> bool:
        """Whether the expiry instant has been reached at ``now_ms``."""
        return now_ms >= self.expires_at_ms

    @property
    def size_bytes(self) -> int:
        """Rough footprint: two bytes per character plus the timestamp."""
        return len(self.key) * 2 + len(self.value) * 2 + 8


@dataclass(frozen=True, slots=True)
class CacheLookup:
    """
    Outcome of one read against the store.

    Keeps "nothing cached" and "cache failed" apart internally even though
    public callers see ``None`` for both.
    """

    status: LookupStatus
    value: JSONValue = None
    error: BaseException | None = None

    @property
    def hit(self) -> bool:
        return self.status == "hit"

    @classmethod
    def found(cls, value: JSONValue) -> CacheLookup:
        return cls(status="hit", value=value)

    @classmethod
    def missing(cls) -> CacheLookup:
        return cls(status="miss")

    @classmethod
    def failed(cls, error: BaseException) -> CacheLookup:
        return cls(status="error", error=error)


@dataclass(frozen=True, slots=True)
class CacheStats:
    """
    Snapshot returned by ``CacheManager.stats``.

    Attributes:
        type: Backend that produced the snapshot.
        total_entries: Rows currently held (expired rows included).
        valid_entries: Rows not yet expired.
        expired_entries: Rows past expiry still awaiting eviction.
        memory_usage_bytes: Estimated footprint of the memory table.
        hits: Lookups answered from cache by this manager.
        misses: Lookups that found nothing.
        errors: Operations that failed and were degraded.
        info: Backend-specific info blob (Redis ``INFO memory``).
    """

    type: BackendType
    total_entries: int = 0
    valid_entries: int = 0
    expired_entries: int = 0
    memory_usage_bytes: int = 0
    hits: int = 0
    misses: int = 0
    errors: int = 0
    info: dict[str, Any] | None = field(default=None)

    @property
    def memory_usage(self) -> str:
        """Human-readable memory estimate, e.g. ``"1.25 KB"``."""
        return f"{self.memory_usage_bytes / 1024:.2f} KB"

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from cache, 0.0 when none happened."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def as_dict(self) -> dict[str, Any]:
        """Render the snapshot as a plain JSON-friendly mapping."""
        return {
            "type": self.type,
            "total_entries": self.total_entries,
            "valid_entries": self.valid_entries,
            "expired_entries": self.expired_entries,
            "memory_usage_bytes": self.memory_usage_bytes,
            "memory_usage": self.memory_usage,
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "hit_rate": self.hit_rate,
            "info": self.info,
        }
