"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Background janitor that periodically purges expired entries and logs a
per-namespace report.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .domains import DOMAINS
from .manager import CacheManager
from .settings import CacheSettings

logger = logging.getLogger("wxcache.janitor")


@dataclass(frozen=True, slots=True)
class JanitorReport:
    """Outcome of one janitor pass."""

    purged: int
    namespace_counts: dict[str, int] = field(default_factory=dict)

    @property
    def total_keys(self) -> int:
        return sum(self.namespace_counts.values())


class CacheJanitor:
    """
    Runs ``purge_expired`` on a fixed interval until shut down.

    Args:
        manager: Cache to maintain.
        interval_s: Seconds between passes.
        namespaces: Namespaces included in the report.
    """

    def __init__(
        self,
        manager: CacheManager,
        *,
        interval_s: float = 3600.0,
        namespaces: Sequence[str] | None = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._manager = manager
        self._interval_s = interval_s
        self._namespaces = tuple(namespaces or (spec.namespace for spec in DOMAINS))
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._last_report: JanitorReport | None = None

    @classmethod
    def from_settings(
        cls,
        manager: CacheManager,
        settings: CacheSettings,
        *,
        namespaces: Sequence[str] | None = None,
    ) -> CacheJanitor:
        """Build a janitor that sweeps every ``settings.sweep_interval_s`` seconds."""
        return cls(manager, interval_s=settings.sweep_interval_s, namespaces=namespaces)

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_report(self) -> JanitorReport | None:
        return self._last_report

    async def run_once(self) -> JanitorReport:
        """Purge expired rows and count live keys per namespace."""
        purged = await self._manager.purge_expired()
        counts = await self._manager.namespace_counts(self._namespaces)
        report = JanitorReport(purged=purged, namespace_counts=counts)
        self._last_report = report
        logger.info(
            "Cache report - purged: %d, total: %d, %s",
            report.purged,
            report.total_keys,
            ", ".join(f"{name}: {count}" for name, count in counts.items()),
        )
        return report

    async def start(self) -> None:
        """Start the sweep loop in the background."""
        if self._running:
            raise RuntimeError("CacheJanitor is already running")
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("CacheJanitor started (interval=%.1fs)", self._interval_s)

    async def shutdown(self) -> None:
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("CacheJanitor shut down")

    async def _loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._interval_s)
                if not self._running:
                    break
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:  # noqa: BLE001
                logger.exception("CacheJanitor pass failed")
