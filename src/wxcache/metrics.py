"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Metrics adapters for cache observability.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

# name -> (help text, label names)
CACHE_COUNTERS: dict[str, tuple[str, tuple[str, ...]]] = {
    "cache_hits_total": ("Cache reads that found a live entry", ()),
    "cache_misses_total": ("Cache reads that found nothing", ()),
    "cache_sets_total": ("Successful cache writes", ()),
    "cache_evictions_total": ("Expired entries removed by a purge", ()),
    "cache_errors_total": ("Cache operations that failed", ("op",)),
}

# (id(registry), namespace) -> (registry, counters). Holding the registry
# keeps its id from being reused while the entry exists.
_registered: dict[tuple[int, str], tuple[Any, dict[str, Any]]] = {}


class CacheMetrics(Protocol):
    """Minimal metrics interface for cache instrumentation."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        """Increment a counter metric."""


class NoOpCacheMetrics:
    """Default metrics sink when no metrics backend is provided."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        _ = name
        _ = value
        _ = tags


def _cache_counters(counter_cls: Any, registry: Any, namespace: str) -> dict[str, Any]:
    """Register the cache counter set once per registry and namespace."""
    slot = (id(registry), namespace)
    entry = _registered.get(slot)
    if entry is not None:
        return entry[1]
    counters = {
        name: counter_cls(
            name=name,
            documentation=doc,
            namespace=namespace,
            labelnames=labels,
            registry=registry,
        )
        for name, (doc, labels) in CACHE_COUNTERS.items()
    }
    _registered[slot] = (registry, counters)
    return counters


class PrometheusCacheMetrics(CacheMetrics):
    """
    Prometheus counters for the fixed set in ``CACHE_COUNTERS``.

    Adapters sharing a registry and namespace share the same counters, so
    building several caches in one process never registers a name twice.
    Requires `prometheus_client` package.
    """

    def __init__(self, *, namespace: str = "wxcache", registry: Any | None = None) -> None:
        try:
            from prometheus_client import REGISTRY, Counter
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "PrometheusCacheMetrics requires `prometheus_client` to be installed."
            ) from exc

        target = registry if registry is not None else REGISTRY
        self._counters = _cache_counters(Counter, target, namespace)

    def incr(self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None) -> None:
        counter = self._counters.get(name)
        if counter is None:
            raise ValueError(f"Unknown cache metric: {name}")
        _, label_names = CACHE_COUNTERS[name]
        if label_names:
            labels = tags or {}
            counter.labels(*(str(labels.get(label, "")) for label in label_names)).inc(value)
        else:
            counter.inc(value)


def create_cache_metrics(mode: str) -> CacheMetrics:
    """Build the metrics sink named by ``CacheSettings.metrics``."""
    if mode == "none":
        return NoOpCacheMetrics()
    if mode == "prometheus":
        return PrometheusCacheMetrics()
    raise ValueError(f"Unknown cache metrics mode: {mode}")
