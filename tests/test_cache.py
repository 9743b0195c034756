# tests/test_cache.py
"""Tests for the license-check cache."""

import redis

from scrapesafe_core.app.services.cache import InMemoryCache, LicenseCheckCache, RedisCache, license_cache_key

from conftest import FakeClock


def test_key_lowercases_buyer():
    assert license_cache_key("story:local:1", "0xABC") == "license:story:local:1:0xabc"


class TestInMemoryCache:

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        store = InMemoryCache(clock=clock)
        store.set("k", {"v": 1}, 60)

        clock.advance(30)
        assert store.get("k") == {"v": 1}

        clock.advance(31)
        assert store.get("k") is None
        assert store.stats()["size"] == 0

    def test_set_overwrites(self):
        store = InMemoryCache(clock=FakeClock())
        store.set("k", 1, 60)
        store.set("k", 2, 60)
        assert store.get("k") == 2

    def test_sweep_removes_only_expired(self):
        clock = FakeClock()
        store = InMemoryCache(clock=clock)
        store.set("old", 1, 10)
        clock.advance(5)
        store.set("new", 2, 60)
        clock.advance(6)

        assert store.sweep() == 1
        assert store.get("new") == 2
        assert store.stats()["size"] == 1


class TestLicenseCheckCache:

    def test_get_set(self):
        cache = LicenseCheckCache(InMemoryCache(clock=FakeClock()), ttl_seconds=60)
        cache.set("story:local:1", "0xABC", True, 7)
        assert cache.get("story:local:1", "0xabc") == {"hasLicense": True, "licenseId": 7}
        assert cache.get("story:local:2", "0xabc") is None

    def test_invalidate_all_aliases(self):
        cache = LicenseCheckCache(InMemoryCache(clock=FakeClock()), ttl_seconds=60)
        cache.set("story:local:1", "0xabc", True, 7)
        cache.set("1", "0xabc", True, 7)
        cache.set("story:local:1", "0xdef", False)

        cache.invalidate(["story:local:1", "1"], "0xABC")

        assert cache.get("story:local:1", "0xabc") is None
        assert cache.get("1", "0xabc") is None
        assert cache.get("story:local:1", "0xdef") == {"hasLicense": False, "licenseId": None}

    def test_invalidate_single_id(self):
        cache = LicenseCheckCache(InMemoryCache(clock=FakeClock()), ttl_seconds=60)
        cache.set("0xasset", "0xabc", True, 1)
        cache.invalidate("0xasset", "0xabc")
        assert cache.get("0xasset", "0xabc") is None


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("down")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("down")

    def delete(self, key):
        raise redis.ConnectionError("down")


class DictRedis:
    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value.encode("utf-8")
        self.ttls[key] = ttl

    def delete(self, key):
        self.data.pop(key, None)


class TestRedisCache:

    def test_round_trip_with_ttl(self):
        client = DictRedis()
        cache = LicenseCheckCache(RedisCache(client), ttl_seconds=60)
        cache.set("story:local:1", "0xabc", True, 3)

        assert cache.get("story:local:1", "0xabc") == {"hasLicense": True, "licenseId": 3}
        assert client.ttls["scrapesafe:license:story:local:1:0xabc"] == 60

        cache.invalidate(["story:local:1"], "0xabc")
        assert cache.get("story:local:1", "0xabc") is None

    def test_errors_degrade_to_miss(self):
        cache = LicenseCheckCache(RedisCache(BrokenRedis()), ttl_seconds=60)
        cache.set("a", "0xabc", True, 1)
        cache.invalidate(["a"], "0xabc")
        assert cache.get("a", "0xabc") is None
