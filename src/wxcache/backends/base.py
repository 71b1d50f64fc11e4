"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: backends/base.py.
"""

from __future__ import annotations

import re
from typing import Protocol

from ..types import CacheStats


class CacheBackend(Protocol):
    """
    Storage primitives implemented by every cache backend.

    Values cross this interface already serialized. Backends raise on
    failure; the manager converts errors into empty results.
    """

    backend_id: str

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, *, ttl_s: float) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def exists(self, key: str) -> bool: ...

    async def clear(self) -> None: ...

    async def keys(self, pattern: str) -> list[str]: ...

    async def stats(self) -> CacheStats: ...

    async def purge_expired(self) -> int: ...

    async def close(self) -> None: ...


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Compile a ``*``-only glob into an anchored regular expression.

    Every character other than ``*`` matches literally.
    """
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile(".*".join(parts), re.DOTALL)


_REDIS_GLOB_SPECIALS = re.compile(r"([?\[\]\\])")


def escape_redis_glob(pattern: str) -> str:
    """Escape Redis glob metacharacters except ``*``."""
    return _REDIS_GLOB_SPECIALS.sub(r"\\\1", pattern)
