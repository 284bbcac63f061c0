"""Tests for the TTL cache backing dashboard stats."""
from app.services.stats_cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_serves_fresh_value_without_recomputing():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=300, clock=clock)
    calls = []

    def compute():
        calls.append(clock.now)
        return {"total": len(calls)}

    assert cache.get_or_compute("stats", compute) == {"total": 1}
    clock.now += 299
    assert cache.get_or_compute("stats", compute) == {"total": 1}
    assert len(calls) == 1


def test_recomputes_after_expiry():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=300, clock=clock)
    cache.set("stats", "old")
    clock.now += 300
    assert cache.get("stats") is None
    assert cache.get_or_compute("stats", lambda: "new") == "new"
    assert cache.get("stats") == "new"


def test_clear():
    cache = TTLCache(ttl_seconds=300)
    cache.set("stats", 1)
    cache.clear()
    assert cache.get("stats") is None


def test_cached_none_is_a_hit():
    clock = FakeClock()
    cache = TTLCache(ttl_seconds=300, clock=clock)
    calls = []

    def compute():
        calls.append(clock.now)
        return None

    assert cache.get_or_compute("stats", compute) is None
    assert cache.get_or_compute("stats", compute) is None
    assert len(calls) == 1

    clock.now += 300
    cache.get_or_compute("stats", compute)
    assert len(calls) == 2
