"""Tests for the bounds TTL cache."""

from desktop_control.cache import BoundsCache
from desktop_control.models import WindowBounds


BOUNDS = WindowBounds(x=1, y=2, width=3, height=4)


def test_hit_within_ttl(clock):
    cache = BoundsCache(ttl=5.0, clock=clock)
    cache.put(123, BOUNDS)
    clock.advance(4.999)
    assert cache.get(123) == BOUNDS


def test_expires_at_ttl(clock):
    cache = BoundsCache(ttl=5.0, clock=clock)
    cache.put(123, BOUNDS)
    clock.advance(5.0)
    assert cache.get(123) is None
    # The stale value is still available for fallback
    assert cache.peek(123) == BOUNDS


def test_explicit_now():
    cache = BoundsCache(ttl=1.0)
    cache.put(7, BOUNDS, now=10.0)
    assert cache.get(7, now=10.5) == BOUNDS
    assert cache.get(7, now=11.0) is None


def test_unknown_pid_not_cached(clock):
    cache = BoundsCache(clock=clock)
    cache.put(0, BOUNDS)
    cache.put(-1, BOUNDS)
    assert len(cache) == 0
    assert cache.get(0) is None


def test_put_refreshes_timestamp(clock):
    cache = BoundsCache(ttl=5.0, clock=clock)
    cache.put(123, BOUNDS)
    clock.advance(4.0)
    newer = WindowBounds(x=10, y=20, width=30, height=40)
    cache.put(123, newer)
    clock.advance(4.0)
    assert cache.get(123) == newer


def test_invalidate(clock):
    cache = BoundsCache(clock=clock)
    cache.put(1, BOUNDS)
    cache.put(2, BOUNDS)
    cache.invalidate(1)
    cache.invalidate(99)
    assert 1 not in cache
    assert 2 in cache
    cache.invalidate_all()
    assert len(cache) == 0


def test_windows_of_one_process_are_separate(clock):
    cache = BoundsCache(clock=clock)
    second = WindowBounds(x=1000, y=500, width=400, height=300)
    cache.put(777, BOUNDS, "0x01")
    cache.put(777, second, "0x02")

    assert cache.get(777, "0x01") == BOUNDS
    assert cache.get(777, "0x02") == second
    assert cache.get(777) is None


def test_invalidate_one_window(clock):
    cache = BoundsCache(clock=clock)
    cache.put(777, BOUNDS, "0x01")
    cache.put(777, BOUNDS, "0x02")
    cache.invalidate(777, "0x01")
    assert cache.peek(777, "0x01") is None
    assert cache.peek(777, "0x02") == BOUNDS


def test_invalidate_pid_drops_every_window(clock):
    cache = BoundsCache(clock=clock)
    cache.put(777, BOUNDS, "0x01")
    cache.put(777, BOUNDS, "0x02")
    cache.put(888, BOUNDS, "0x03")
    cache.invalidate(777)
    assert 777 not in cache
    assert len(cache) == 1
