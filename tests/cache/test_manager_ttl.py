from __future__ import annotations

import asyncio

from wxcache import CacheKey, CacheManager, InMemoryCacheBackend
from wxcache.types import CacheStats

T0 = 1_700_000_000.0


def run_async(coro):
    return asyncio.run(coro)


class FakeClock:
    def __init__(self, start: float = T0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingMetrics:
    def __init__(self) -> None:
        self.calls: list[tuple[str, int, dict[str, str]]] = []

    def incr(self, name, value=1, *, tags=None):
        self.calls.append((name, value, dict(tags or {})))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.calls]


class ExplodingBackend:
    backend_id = "memory"

    async def get(self, key):
        raise RuntimeError("boom")

    async def set(self, key, value, *, ttl_s):
        raise RuntimeError("boom")

    async def delete(self, key):
        raise RuntimeError("boom")

    async def exists(self, key):
        raise RuntimeError("boom")

    async def clear(self):
        raise RuntimeError("boom")

    async def keys(self, pattern):
        raise RuntimeError("boom")

    async def stats(self):
        raise RuntimeError("boom")

    async def purge_expired(self):
        raise RuntimeError("boom")

    async def close(self):
        raise RuntimeError("boom")


def make_manager(clock: FakeClock | None = None, **kwargs) -> tuple[CacheManager, FakeClock]:
    clock = clock or FakeClock()
    return CacheManager(InMemoryCacheBackend(clock=clock), **kwargs), clock


def test_value_is_returned_until_ttl_elapses():
    async def scenario() -> None:
        cache, clock = make_manager()
        assert await cache.set("k", {"temp": 21.5}, 10) is True
        assert await cache.get("k") == {"temp": 21.5}

        clock.advance(9)
        assert await cache.get("k") == {"temp": 21.5}

        clock.advance(1)
        assert await cache.get("k") is None

    run_async(scenario())


def test_zero_and_negative_ttl_expire_immediately():
    async def scenario() -> None:
        cache, _ = make_manager()
        assert await cache.set("zero", "v", 0) is True
        assert await cache.get("zero") is None
        assert await cache.set("negative", "v", -5) is True
        assert await cache.exists("negative") is False

    run_async(scenario())


def test_overwrite_replaces_value_and_ttl():
    async def scenario() -> None:
        cache, clock = make_manager()
        await cache.set("k", "v1", 100)
        clock.advance(50)
        await cache.set("k", "v2", 10)
        assert await cache.get("k") == "v2"

        clock.advance(10)
        assert await cache.get("k") is None

    run_async(scenario())


def test_default_ttl_applies_when_none_given():
    async def scenario() -> None:
        cache, clock = make_manager(default_ttl_s=300)
        await cache.set("k", 1)
        clock.advance(299)
        assert await cache.get("k") == 1
        clock.advance(1)
        assert await cache.get("k") is None

    run_async(scenario())


def test_missing_key_returns_none_without_raising():
    async def scenario() -> None:
        cache, _ = make_manager()
        assert await cache.get("nonexistent-key") is None
        assert await cache.exists("nonexistent-key") is False
        assert await cache.delete("nonexistent-key") is True

    run_async(scenario())


def test_cache_key_pairs_get_the_prefix():
    async def scenario() -> None:
        cache, _ = make_manager()
        await cache.set(CacheKey("weather", "oslo"), {"temp": -3})
        assert await cache.get("weather_app:weather:oslo") == {"temp": -3}
        assert await cache.keys("*") == ["weather_app:weather:oslo"]

    run_async(scenario())


def test_lookup_distinguishes_stored_null_from_miss():
    async def scenario() -> None:
        cache, _ = make_manager()
        await cache.set("nothing", None)

        stored = await cache.lookup("nothing")
        missing = await cache.lookup("absent")
        assert stored.hit is True
        assert stored.value is None
        assert missing.status == "miss"
        assert await cache.get("nothing") is None
        assert await cache.expire("nothing", 60) is True

    run_async(scenario())


def test_unserializable_values_are_rejected_at_set():
    async def scenario() -> None:
        cache, _ = make_manager()
        cyclic: dict = {}
        cyclic["self"] = cyclic

        assert await cache.set("k", {"when": object()}) is False  # type: ignore[dict-item]
        assert await cache.set("k", cyclic) is False
        assert await cache.get("k") is None

    run_async(scenario())


def test_clear_empties_everything():
    async def scenario() -> None:
        cache, _ = make_manager()
        await cache.mset({"a": 1, "b": 2})
        await cache.set(CacheKey("weather", "rome"), {"temp": 30})
        assert await cache.clear() is True

        assert await cache.mget(["a", "b", "weather_app:weather:rome"]) == {
            "a": None,
            "b": None,
            "weather_app:weather:rome": None,
        }

    run_async(scenario())


def test_mset_then_mget_reports_missing_keys_as_none():
    async def scenario() -> None:
        cache, _ = make_manager()
        assert await cache.mset({"a": 1, "b": 2}) == {"a": True, "b": True}
        assert await cache.mget(["a", "b", "c"]) == {"a": 1, "b": 2, "c": None}

    run_async(scenario())


def test_incr_counts_from_zero():
    async def scenario() -> None:
        cache, _ = make_manager()
        assert await cache.incr("counter") == 1
        assert await cache.incr("counter", 5) == 6
        assert await cache.incr("ratio", 0.5) == 0.5
        assert await cache.get("counter") == 6

    run_async(scenario())


def test_incr_resets_custom_ttl_to_default():
    async def scenario() -> None:
        cache, clock = make_manager(default_ttl_s=300)
        await cache.set("counter", 1, 5)
        assert await cache.incr("counter") == 2

        clock.advance(10)
        assert await cache.get("counter") == 2

    run_async(scenario())


def test_incr_on_non_numeric_value_returns_none():
    async def scenario() -> None:
        cache, _ = make_manager()
        await cache.set("label", "sunny")
        await cache.set("flag", True)
        assert await cache.incr("label") is None
        assert await cache.incr("flag") is None
        assert await cache.get("label") == "sunny"

    run_async(scenario())


def test_concurrent_incr_calls_do_not_lose_updates():
    async def scenario() -> None:
        cache, _ = make_manager()
        await asyncio.gather(*(cache.incr("hits") for _ in range(20)))
        assert await cache.get("hits") == 20

    run_async(scenario())


def test_expire_sets_new_ttl_or_reports_absent_key():
    async def scenario() -> None:
        cache, clock = make_manager()
        await cache.set("k", "v", 300)
        assert await cache.expire("k", 1) is True
        assert await cache.expire("absent", 10) is False

        clock.advance(1)
        assert await cache.get("k") is None

    run_async(scenario())


def test_keys_glob_matches_whole_key_and_escapes_other_characters():
    async def scenario() -> None:
        cache, _ = make_manager()
        await cache.mset({"a.b": 1, "axb": 2, "weather_app:weather:paris": 3})

        assert await cache.keys("a.b") == ["a.b"]
        assert sorted(await cache.keys("a*")) == ["a.b", "axb"]
        assert await cache.keys("weather") == []
        assert await cache.keys("*:weather:*") == ["weather_app:weather:paris"]
        assert await cache.keys("[") == []

    run_async(scenario())


def test_stats_reports_entries_usage_and_hit_rate():
    async def scenario() -> None:
        cache, clock = make_manager()
        await cache.set("a", 1, 10)
        await cache.set("b", 2, 100)
        clock.advance(20)

        assert await cache.get("b") == 2
        assert await cache.get("zzz") is None

        stats = await cache.stats()
        assert isinstance(stats, CacheStats)
        assert stats.type == "memory"
        assert stats.total_entries == 2
        assert stats.valid_entries == 1
        assert stats.expired_entries == 1
        # Two rows of a one-char key and a one-char value.
        assert stats.memory_usage_bytes == 24
        assert stats.memory_usage == "0.02 KB"
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.hit_rate == 0.5
        assert stats.as_dict()["type"] == "memory"

    run_async(scenario())


def test_purge_expired_and_namespace_counts():
    async def scenario() -> None:
        metrics = RecordingMetrics()
        cache, clock = make_manager(metrics=metrics)
        await cache.set(CacheKey("weather", "oslo"), {}, 10)
        await cache.set(CacheKey("weather", "rome"), {}, 100)
        await cache.set(CacheKey("forecast", "rome"), {}, 10)
        clock.advance(10)

        assert await cache.purge_expired() == 2
        assert await cache.purge_expired() == 0
        assert await cache.namespace_counts(["weather", "forecast"]) == {
            "weather": 1,
            "forecast": 0,
        }
        assert ("cache_evictions_total", 2, {}) in metrics.calls

    run_async(scenario())


def test_backend_failures_degrade_to_empty_results():
    async def scenario() -> None:
        metrics = RecordingMetrics()
        cache = CacheManager(ExplodingBackend(), metrics=metrics)

        assert await cache.set("k", 1) is False
        assert await cache.get("k") is None
        assert (await cache.lookup("k")).status == "error"
        assert await cache.delete("k") is False
        assert await cache.exists("k") is False
        assert await cache.clear() is False
        assert await cache.stats() is None
        assert await cache.keys("*") == []
        assert await cache.incr("k") is None
        assert await cache.expire("k", 10) is False
        assert await cache.purge_expired() == 0
        await cache.close()

        ops = {tags["op"] for name, _, tags in metrics.calls if name == "cache_errors_total"}
        assert {"set", "get", "delete", "exists", "clear", "stats", "keys", "purge"} <= ops

    run_async(scenario())


def test_metrics_record_hits_misses_and_sets():
    async def scenario() -> None:
        metrics = RecordingMetrics()
        cache, _ = make_manager(metrics=metrics)
        await cache.set("k", 1)
        await cache.get("k")
        await cache.get("missing")

        assert metrics.names() == ["cache_sets_total", "cache_hits_total", "cache_misses_total"]

    run_async(scenario())


class BrokenMetrics:
    def incr(self, name, value=1, *, tags=None):
        raise RuntimeError(f"metrics sink down: {name}")


def test_metrics_failures_never_reach_the_caller(caplog):
    async def scenario() -> None:
        cache, _ = make_manager(metrics=BrokenMetrics())
        assert await cache.set("k", 1) is True
        assert await cache.get("k") == 1
        assert await cache.get("missing") is None
        assert await cache.set("bad", object()) is False
        assert await cache.incr("n") == 1

    run_async(scenario())
    assert "cache_sets_total could not be recorded" in caplog.text


def test_namespace_counts_ignore_expired_rows_without_a_purge():
    async def scenario() -> None:
        cache, clock = make_manager()
        await cache.set(CacheKey("weather", "oslo"), {"temp": -2}, 10)
        await cache.set(CacheKey("weather", "rome"), {"temp": 28}, 100)
        clock.advance(20)

        assert await cache.namespace_counts(["weather"]) == {"weather": 1}
        assert await cache.keys("*") == ["weather_app:weather:rome"]
        assert (await cache.stats()).expired_entries == 1

    run_async(scenario())
