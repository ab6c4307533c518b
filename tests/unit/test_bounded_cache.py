"""
Unit tests for the bounded insertion-order cache.
"""
import pytest

from xnotify.services.bounded_cache import BoundedCache


class TestBoundedCache:
    """Test suite for BoundedCache."""

    def test_get_miss(self):
        cache = BoundedCache(2)

        assert cache.get('missing') is None

    def test_never_exceeds_capacity(self):
        """Test size stays within capacity after every insert."""
        cache = BoundedCache(3)

        for i in range(10):
            cache.put(f'k{i}', i)
            assert len(cache) <= 3

        assert cache.keys_in_eviction_order() == ['k7', 'k8', 'k9']

    def test_evicts_in_insertion_order_not_recency(self):
        """Test reads do not protect an entry from eviction."""
        cache = BoundedCache(2)
        cache.put('a', 1)
        cache.put('b', 2)

        # Reading 'a' does not refresh it
        assert cache.get('a') == 1
        cache.put('c', 3)

        assert 'a' not in cache
        assert cache.get('b') == 2
        assert cache.get('c') == 3

    def test_replacing_keeps_queue_position(self):
        """Test overwriting a key does not move it to the back."""
        cache = BoundedCache(2)
        cache.put('a', 1)
        cache.put('b', 2)
        cache.put('a', 10)
        cache.put('c', 3)

        assert 'a' not in cache
        assert cache.keys_in_eviction_order() == ['b', 'c']

    def test_clear(self):
        cache = BoundedCache(5)
        cache.put('a', 1)
        cache.put('b', 2)

        assert cache.clear() == 2
        assert len(cache) == 0
        assert cache.keys_in_eviction_order() == []

    def test_invalid_capacity(self):
        with pytest.raises(ValueError, match="at least 1"):
            BoundedCache(0)
