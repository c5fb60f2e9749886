"""
Unit tests for the bounded, freshness-aware weather cache.
"""
import dataclasses
import threading
from unittest.mock import patch

import pytest

from weather_sdk.cache import BoundedFreshCache, CacheEntry, normalize_key
from weather_sdk.errors import InvalidArgumentError


def entry(payload="data", fetched_at=1000.0):
    return CacheEntry(payload, fetched_at)


class TestCacheEntry:
    def test_fields(self):
        """Test entry exposes payload and fetch time."""
        e = CacheEntry({"name": "Tel Aviv"}, 1000.0)
        assert e.payload == {"name": "Tel Aviv"}
        assert e.fetched_at == 1000.0

    def test_entry_is_immutable(self):
        """Test fields cannot be reassigned after construction."""
        e = entry()
        with pytest.raises(dataclasses.FrozenInstanceError):
            e.fetched_at = 2000.0

    def test_fresh_before_ttl(self):
        assert entry(fetched_at=1000.0).is_fresh(600, now=1599.0)

    def test_stale_exactly_at_ttl(self):
        """Test an entry exactly TTL seconds old is stale."""
        assert not entry(fetched_at=1000.0).is_fresh(600, now=1600.0)

    def test_stale_after_ttl(self):
        assert not entry(fetched_at=1000.0).is_fresh(600, now=1900.0)

    @patch("time.time")
    def test_is_fresh_uses_current_time(self, mock_time):
        """Test freshness defaults to the wall clock."""
        mock_time.return_value = 1599.0
        assert entry(fetched_at=1000.0).is_fresh(600)

        mock_time.return_value = 1600.0
        assert not entry(fetched_at=1000.0).is_fresh(600)


class TestNormalizeKey:
    def test_trims_and_folds_case(self):
        assert normalize_key("  Tel Aviv ") == "tel aviv"

    def test_idempotent(self):
        once = normalize_key("  LONDON\t")
        assert normalize_key(once) == once


class TestBoundedFreshCacheOperations:
    def setup_method(self):
        """Setup test fixtures."""
        self.cache = BoundedFreshCache(capacity=3)

    def test_cache_initialization(self):
        cache = BoundedFreshCache()
        assert cache.capacity == 10
        assert cache.size() == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            BoundedFreshCache(capacity=0)

    def test_put_and_lookup(self):
        """Test basic cache put and lookup operations."""
        e = entry()
        self.cache.put("Tel Aviv", "Tel Aviv", e)

        assert self.cache.lookup("Tel Aviv") is e
        assert self.cache.size() == 1
        assert len(self.cache) == 1

    def test_lookup_missing_key(self):
        assert self.cache.lookup("Paris") is None

    def test_lookup_normalizes_key(self):
        """Test differently spelled names hit the same slot."""
        e = entry()
        self.cache.put(" City ", "City", e)

        assert self.cache.lookup("city") is e
        assert self.cache.lookup("  CITY") is e
        assert "CiTy" in self.cache
        assert self.cache.size() == 1

    def test_original_key_is_recorded(self):
        self.cache.put(" New York ", "New York", entry())
        assert self.cache.original_key_of("new york") == "New York"
        assert self.cache.original_key_of("boston") is None

    def test_overwrite_replaces_entry(self):
        """Test overwriting an existing key replaces the entry wholesale."""
        first = entry("old", 1000.0)
        second = entry("new", 2000.0)
        self.cache.put("Paris", "Paris", first)
        self.cache.put("PARIS", "PARIS", second)

        assert self.cache.lookup("paris") is second
        assert self.cache.original_key_of("paris") == "PARIS"
        assert self.cache.size() == 1

    def test_stale_entries_are_kept(self):
        """Test the cache never drops entries because they are old."""
        self.cache.put("Paris", "Paris", entry(fetched_at=0.0))
        assert self.cache.lookup("Paris") is not None

    def test_blank_key_rejected(self):
        with pytest.raises(InvalidArgumentError):
            self.cache.put("   ", "   ", entry())

    def test_snapshot_keys_is_a_copy(self):
        """Test snapshot stays unchanged while the cache changes."""
        self.cache.put("A", "A", entry())
        self.cache.put("B", "B", entry())

        snapshot = self.cache.snapshot_keys()
        self.cache.put("C", "C", entry())

        assert snapshot == ["a", "b"]
        assert self.cache.snapshot_keys() == ["a", "b", "c"]

    def test_clear(self):
        self.cache.put("A", "A", entry())
        self.cache.clear()

        assert self.cache.size() == 0
        assert self.cache.original_key_of("a") is None


class TestBoundedFreshCacheEviction:
    def test_evicts_oldest_insert(self):
        """Test capacity=2, insert A, B, C evicts A."""
        cache = BoundedFreshCache(capacity=2)
        cache.put("A", "A", entry())
        cache.put("B", "B", entry())
        cache.put("C", "C", entry())

        assert cache.size() == 2
        assert cache.lookup("A") is None
        assert sorted(cache.snapshot_keys()) == ["b", "c"]
        assert cache.original_key_of("a") is None

    def test_lookup_refreshes_recency(self):
        """Test capacity=2, insert A, B, read A, insert C evicts B."""
        cache = BoundedFreshCache(capacity=2)
        cache.put("A", "A", entry())
        cache.put("B", "B", entry())
        cache.lookup("A")
        cache.put("C", "C", entry())

        assert cache.lookup("B") is None
        assert sorted(cache.snapshot_keys()) == ["a", "c"]

    def test_stale_lookup_refreshes_recency(self):
        """Test hits on stale entries count as access."""
        cache = BoundedFreshCache(capacity=2)
        cache.put("A", "A", entry(fetched_at=0.0))
        cache.put("B", "B", entry())
        cache.lookup("A")
        cache.put("C", "C", entry())

        assert "a" in cache
        assert "b" not in cache

    def test_overwrite_never_evicts(self):
        """Test rewriting an existing key at capacity keeps all keys."""
        cache = BoundedFreshCache(capacity=2)
        cache.put("A", "A", entry())
        cache.put("B", "B", entry())
        cache.put("A", "A", entry("again"))

        assert cache.size() == 2
        assert cache.snapshot_keys() == ["b", "a"]

    def test_overwrite_refreshes_recency(self):
        cache = BoundedFreshCache(capacity=2)
        cache.put("A", "A", entry())
        cache.put("B", "B", entry())
        cache.put("A", "A", entry("again"))
        cache.put("C", "C", entry())

        assert "b" not in cache
        assert sorted(cache.snapshot_keys()) == ["a", "c"]

    def test_size_never_exceeds_capacity(self):
        """Test long insert sequences always evict the least recent key."""
        cache = BoundedFreshCache(capacity=3)
        for i in range(20):
            cache.put(f"city-{i}", f"City {i}", entry(i))
            assert cache.size() <= 3
            if i >= 3:
                assert f"city-{i - 3}" not in cache

        assert cache.snapshot_keys() == ["city-17", "city-18", "city-19"]


class TestBoundedFreshCacheConcurrency:
    def test_parallel_puts_keep_structures_aligned(self):
        """Test concurrent writers never break the capacity or key sets."""
        cache = BoundedFreshCache(capacity=5)
        errors = []

        def writer(worker):
            try:
                for i in range(200):
                    key = f"w{worker}-{i % 12}"
                    cache.put(key, key.upper(), entry(i))
                    cache.lookup(f"w{(worker + 1) % 4}-{i % 12}")
            except Exception as e:  # pragma: no cover - surfaced by assertion
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert cache.size() == 5
        for key in cache.snapshot_keys():
            assert cache.original_key_of(key) == key.upper()
