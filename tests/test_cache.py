"""Tests for the bounded TTL cache."""

import pytest

from ethosradar.core.cache import BoundedTTLCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestBoundedTTLCache:

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = BoundedTTLCache(ttl_seconds=300, max_entries=100, clock=self.clock)

    def test_get_within_ttl(self):
        self.cache.put("profileId:1", {"score": 10})
        self.clock.advance(299)
        assert self.cache.get("profileId:1") == {"score": 10}

    def test_expired_entry_is_a_miss(self):
        self.cache.put("profileId:1", "value")
        self.clock.advance(300)
        assert self.cache.get("profileId:1") is None
        assert len(self.cache) == 0

    def test_missing_key(self):
        assert self.cache.get("nope") is None
        assert "nope" not in self.cache

    def test_overwrite_restamps(self):
        self.cache.put("k", 1)
        self.clock.advance(200)
        self.cache.put("k", 2)
        self.clock.advance(200)
        assert self.cache.get("k") == 2

    def test_101st_insert_evicts_first(self):
        for i in range(100):
            self.cache.put(f"user{i}", i)
        assert len(self.cache) == 100
        self.cache.put("user100", 100)
        assert len(self.cache) == 100
        assert self.cache.get("user0") is None
        assert self.cache.get("user1") == 1
        assert self.cache.get("user100") == 100

    def test_eviction_is_fifo_not_lru(self):
        for i in range(100):
            self.cache.put(f"user{i}", i)
        # Reading the oldest entry does not protect it
        assert self.cache.get("user0") == 0
        self.cache.put("user100", 100)
        assert self.cache.get("user0") is None

    def test_overwrite_moves_to_newest(self):
        for i in range(100):
            self.cache.put(f"user{i}", i)
        self.cache.put("user0", "fresh")
        self.cache.put("user100", 100)
        assert self.cache.get("user0") == "fresh"
        assert self.cache.get("user1") is None

    def test_keys_oldest_first(self):
        for key in ("a", "b", "c"):
            self.cache.put(key, key)
        assert self.cache.keys() == ["a", "b", "c"]

    def test_keys_follow_eviction_order_after_overwrite(self):
        small = BoundedTTLCache(ttl_seconds=300, max_entries=3, clock=self.clock)
        for key in ("a", "b", "c"):
            small.put(key, key)
        small.put("a", "again")
        assert small.keys() == ["b", "c", "a"]
        small.put("d", "d")
        assert small.keys() == ["c", "a", "d"]
        assert small.get("b") is None

    def test_invalidate_and_clear(self):
        self.cache.put("a", 1)
        self.cache.put("b", 2)
        self.cache.invalidate("a")
        assert self.cache.get("a") is None
        self.cache.clear()
        assert len(self.cache) == 0


def test_rejects_bad_bounds():
    with pytest.raises(ValueError):
        BoundedTTLCache(ttl_seconds=0)
    with pytest.raises(ValueError):
        BoundedTTLCache(max_entries=0)
