"""
Tests for the in-memory response cache.
"""

from neon_access.protocols import CacheStore
from neon_access.repositories import InMemoryCacheRepository


def test_satisfies_protocol(cache):
    assert isinstance(cache, CacheStore)


def test_set_then_get_returns_value(cache):
    cache.set("sites", [{"siteCode": "SRER"}])
    assert cache.get("sites") == [{"siteCode": "SRER"}]


def test_get_unknown_key_is_miss(cache):
    assert cache.get("nope") is None
    assert cache.get_stats()["misses"] == 1


def test_entry_valid_up_to_ttl_boundary(cache, clock):
    cache.set("site", {"siteCode": "SRER"}, ttl=60)
    clock.advance(60)
    assert cache.get("site") == {"siteCode": "SRER"}


def test_expired_entry_is_removed_on_read(cache, clock):
    cache.set("site", {"siteCode": "SRER"}, ttl=60)
    clock.advance(61)

    assert cache.get("site") is None
    assert cache.size() == 0


def test_default_ttl_used_when_none_given(clock):
    store = InMemoryCacheRepository(default_ttl=10, clock=clock)
    store.set("k", {"v": 1})

    clock.advance(11)
    assert store.get("k") is None


def test_set_replaces_existing_entry(cache, clock):
    cache.set("k", {"v": 1}, ttl=10)
    clock.advance(5)
    cache.set("k", {"v": 2}, ttl=10)
    clock.advance(8)

    # Second write restarted the clock for this key
    assert cache.get("k") == {"v": 2}


def test_typed_get_discards_wrong_shape(cache):
    cache.set("products", {"unexpected": "object"})

    assert cache.get("products", list) is None
    assert cache.size() == 0


def test_typed_get_returns_matching_shape(cache):
    cache.set("products", [{"productCode": "DP1.00001.001"}])
    assert cache.get("products", list) == [{"productCode": "DP1.00001.001"}]


def test_sweep_removes_only_expired(cache, clock):
    cache.set("short", {"v": 1}, ttl=10)
    cache.set("long", {"v": 2}, ttl=100)
    clock.advance(50)

    assert cache.sweep() == 1
    assert cache.get("long") == {"v": 2}


def test_sweep_is_idempotent(cache, clock):
    cache.set("a", {"v": 1}, ttl=10)
    cache.set("b", {"v": 2}, ttl=10)
    clock.advance(11)

    assert cache.sweep() == 2
    assert cache.sweep() == 0


def test_delete_and_clear(cache):
    cache.set("a", {"v": 1})
    cache.set("b", {"v": 2})

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert cache.clear() == 1
    assert cache.size() == 0


def test_stats_track_hits_and_misses(cache):
    cache.set("a", {"v": 1})
    cache.get("a")
    cache.get("a")
    cache.get("missing")

    stats = cache.get_stats()
    assert stats["total_entries"] == 1
    assert stats["hits"] == 2
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 2 / 3
    assert stats["default_ttl"] == 3600


def test_zero_default_ttl_is_respected(clock):
    store = InMemoryCacheRepository(default_ttl=0, clock=clock)
    store.set("k", {"v": 1})

    assert store.default_ttl == 0
    assert store.get("k") == {"v": 1}
    clock.advance(1)
    assert store.get("k") is None
