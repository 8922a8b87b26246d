"""
Unit tests for MappingCache.

Tests cover:
- Compute-once semantics
- Failed resolutions are not cached
- Concurrent population of an uncached key
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from procmap.core.errors import NoOrderedFieldsError
from procmap.mapping import MappingCache, resolve_field_order

from fakes import CreateUser


class TestMappingCache:
    """Test suite for MappingCache."""

    def test_second_lookup_skips_compute(self):
        """
        Test a populated key is served without recomputation.

        Arrange: Cache and a counting compute function
        Act: Look the same key up twice
        Assert: Compute ran once; both lookups return the same object
        """
        cache = MappingCache()
        calls = []

        def compute():
            calls.append(1)
            return resolve_field_order("CreateUser", CreateUser)

        first = cache.get_or_compute("CreateUser", compute)
        second = cache.get_or_compute("CreateUser", compute)

        assert len(calls) == 1
        assert second is first
        assert first == ("name", "email", "age")

    def test_keys_are_independent(self):
        cache = MappingCache()

        cache.get_or_compute("a", lambda: ("x",))
        cache.get_or_compute("b", lambda: ("y", "z"))

        assert cache.get("a") == ("x",)
        assert cache.get("b") == ("y", "z")
        assert len(cache) == 2
        assert "a" in cache

    def test_get_missing_key(self):
        assert MappingCache().get("missing") is None

    def test_failed_compute_is_not_cached(self):
        """
        Test a failing resolution runs again on the next lookup.

        Arrange: Compute that fails once, then succeeds
        Act: Look up twice
        Assert: First raises, second stores the result
        """
        cache = MappingCache()
        attempts = []

        def compute():
            attempts.append(1)
            if len(attempts) == 1:
                raise NoOrderedFieldsError("Type Fixed has no field specified with order", "Fixed")
            return ("id",)

        with pytest.raises(NoOrderedFieldsError):
            cache.get_or_compute("Fixed", compute)

        assert "Fixed" not in cache

        assert cache.get_or_compute("Fixed", compute) == ("id",)
        assert len(attempts) == 2

    def test_list_results_stored_as_tuple(self):
        """Test stored sequences cannot be mutated by callers."""
        cache = MappingCache()

        fields = cache.get_or_compute("k", lambda: ["a", "b"])

        assert fields == ("a", "b")
        assert isinstance(fields, tuple)

    def test_clear(self):
        cache = MappingCache()
        cache.get_or_compute("k", lambda: ("a",))

        cache.clear()

        assert len(cache) == 0
        assert cache.get("k") is None


class TestMappingCacheConcurrency:
    """Concurrent access to an uncached key."""

    def test_fifty_concurrent_callers_converge(self):
        """
        Test racing resolutions settle on exactly one entry.

        Arrange: 50 threads released together by a barrier
        Act: All call get_or_compute on the same uncached key
        Assert: One entry, equal to a single-threaded resolution, and every
            caller received that same stored object
        """
        cache = MappingCache()
        workers = 50
        barrier = threading.Barrier(workers)
        expected = resolve_field_order("CreateUser", CreateUser)

        def lookup():
            barrier.wait()
            return cache.get_or_compute(
                "CreateUser",
                lambda: resolve_field_order("CreateUser", CreateUser),
            )

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: lookup(), range(workers)))

        assert len(cache) == 1
        assert cache.get("CreateUser") == expected
        stored = cache.get("CreateUser")
        assert all(result is stored for result in results)
