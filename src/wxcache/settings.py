"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache settings and explicit environment loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .keys import DEFAULT_KEY_PREFIX

BACKEND_MODES = ("auto", "memory", "redis")
METRICS_MODES = ("none", "prometheus")

_BACKEND_ALIASES = {
    "auto": "auto",
    "mem": "memory",
    "memory": "memory",
    "inmemory": "memory",
    "in_memory": "memory",
    "redis": "redis",
}


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def normalize_backend_mode(raw: str) -> str:
    """Map backend aliases onto ``auto`` / ``memory`` / ``redis``."""
    mode = _BACKEND_ALIASES.get(raw.strip().lower())
    if mode is None:
        raise ValueError(f"Unknown WXCACHE_BACKEND: {raw}")
    return mode


@dataclass(frozen=True, slots=True)
class CacheSettings:
    """Explicit settings used to build the cache and its backend."""

    backend: str = "auto"
    key_prefix: str = DEFAULT_KEY_PREFIX
    default_ttl_s: float = 300.0

    redis_url: str | None = None
    redis_host: str | None = None
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str | None = None
    connect_timeout_s: float = 2.0

    sweep_interval_s: float = 3600.0
    metrics: str = "none"

    def __post_init__(self) -> None:
        if self.backend not in BACKEND_MODES:
            raise ValueError(f"Unknown cache backend mode: {self.backend}")
        if self.metrics not in METRICS_MODES:
            raise ValueError(f"Unknown cache metrics mode: {self.metrics}")
        if self.connect_timeout_s <= 0:
            raise ValueError("connect_timeout_s must be > 0")
        if self.sweep_interval_s <= 0:
            raise ValueError("sweep_interval_s must be > 0")

    @property
    def redis_configured(self) -> bool:
        """Whether any Redis location was given explicitly."""
        return bool(self.redis_url or self.redis_host)

    def redis_dsn(self) -> str:
        """Return the Redis URL, assembling it from parts when needed."""
        if self.redis_url:
            return self.redis_url
        host = self.redis_host or "localhost"
        if self.redis_password:
            return f"redis://:{self.redis_password}@{host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{host}:{self.redis_port}/{self.redis_db}"

    @staticmethod
    def from_env() -> "CacheSettings":
        """Load settings from `WXCACHE_*` environment variables."""
        return CacheSettings(
            backend=normalize_backend_mode(_env_first("WXCACHE_BACKEND", default="auto") or "auto"),
            key_prefix=_env_first("WXCACHE_KEY_PREFIX", default=DEFAULT_KEY_PREFIX)
            or DEFAULT_KEY_PREFIX,
            default_ttl_s=float(_env_first("WXCACHE_DEFAULT_TTL_S", default="300") or "300"),
            redis_url=_env_first("WXCACHE_REDIS_URL", "REDIS_URL"),
            redis_host=_env_first("WXCACHE_REDIS_HOST"),
            redis_port=int(_env_first("WXCACHE_REDIS_PORT", default="6379") or "6379"),
            redis_db=int(_env_first("WXCACHE_REDIS_DB", default="0") or "0"),
            redis_password=_env_first("WXCACHE_REDIS_PASSWORD"),
            connect_timeout_s=float(
                _env_first("WXCACHE_CONNECT_TIMEOUT_S", default="2") or "2"
            ),
            sweep_interval_s=float(
                _env_first("WXCACHE_SWEEP_INTERVAL_S", default="3600") or "3600"
            ),
            metrics=(_env_first("WXCACHE_METRICS", default="none") or "none").lower(),
        )
