"""
Tests for the TTL + LRU cache.
"""

import pytest

from codectx.shared.infrastructure.ttl_cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestTTLCache:
    """Test expiry, eviction and invalidation."""

    def test_get_set(self):
        cache = TTLCache(maxsize=10, ttl=60)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache

    def test_entry_expires(self):
        clock = FakeClock()
        cache = TTLCache(maxsize=10, ttl=5, clock=clock)
        cache.set("a", 1)

        clock.now = 4.9
        assert cache.get("a") == 1
        clock.now = 5.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        clock = FakeClock()
        cache = TTLCache(maxsize=10, ttl=5, clock=clock)
        cache.set("long", 1, ttl=100)
        clock.now = 50
        assert cache.get("long") == 1

    def test_lru_eviction(self):
        """Least recently used entry is evicted first."""
        cache = TTLCache(maxsize=2, ttl=60)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("a") == 1
        assert cache.get("b") is None
        assert cache.get("c") == 3

    def test_invalidate_prefix(self):
        cache = TTLCache(maxsize=10, ttl=60)
        cache.set("alice\x00a.py", 1)
        cache.set("alice\x00b.py", 2)
        cache.set("bob\x00a.py", 3)

        assert cache.invalidate_prefix("alice\x00") == 2
        assert cache.get("bob\x00a.py") == 3

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            TTLCache(maxsize=0)
        with pytest.raises(ValueError):
            TTLCache(ttl=0)
