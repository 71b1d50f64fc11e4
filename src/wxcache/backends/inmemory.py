"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: backends/inmemory.py.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from ..types import CacheEntry, CacheStats
from .base import CacheBackend, glob_to_regex


class InMemoryCacheBackend(CacheBackend):
    """
    Process-local TTL table.

    Expired rows are evicted lazily when touched and swept on every
    ``set``. Nothing here suspends, so a check-then-delete cannot be
    interleaved with another coroutine.
    """

    backend_id = "memory"

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._rows: dict[str, CacheEntry] = {}

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _live_row(self, key: str) -> CacheEntry | None:
        row = self._rows.get(key)
        if row is None:
            return None
        if row.is_expired(self._now_ms()):
            self._rows.pop(key, None)
            return None
        return row

    async def get(self, key: str) -> str | None:
        row = self._live_row(key)
        return None if row is None else row.value

    async def set(self, key: str, value: str, *, ttl_s: float) -> None:
        expires_at_ms = self._now_ms() + int(ttl_s * 1000)
        self._rows[key] = CacheEntry(key=key, value=value, expires_at_ms=expires_at_ms)
        self._sweep()

    async def delete(self, key: str) -> None:
        self._rows.pop(key, None)

    async def exists(self, key: str) -> bool:
        return self._live_row(key) is not None

    async def clear(self) -> None:
        self._rows.clear()

    async def keys(self, pattern: str) -> list[str]:
        regex = glob_to_regex(pattern)
        now_ms = self._now_ms()
        return [
            key
            for key, row in self._rows.items()
            if not row.is_expired(now_ms) and regex.fullmatch(key)
        ]

    async def stats(self) -> CacheStats:
        now_ms = self._now_ms()
        rows = list(self._rows.values())
        expired = sum(1 for row in rows if row.is_expired(now_ms))
        return CacheStats(
            type="memory",
            total_entries=len(rows),
            valid_entries=len(rows) - expired,
            expired_entries=expired,
            memory_usage_bytes=sum(row.size_bytes for row in rows),
        )

    async def purge_expired(self) -> int:
        return self._sweep()

    async def close(self) -> None:
        return None

    def _sweep(self) -> int:
        now_ms = self._now_ms()
        stale = [key for key, row in self._rows.items() if row.is_expired(now_ms)]
        for key in stale:
            del self._rows[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._rows)
