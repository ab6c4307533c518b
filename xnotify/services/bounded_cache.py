"""
Bounded in-memory cache with insertion-order eviction.

Used for the topic directory and the notification client pool. Entries
are evicted strictly in the order their keys were first inserted, even if
they were read since; reads never refresh an entry.
"""

import logging
from collections import deque
from typing import Deque, Dict, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class BoundedCache(Generic[K, V]):
    """
    Cache holding at most ``capacity`` entries.

    Attributes:
        name: Cache name used in logs
        capacity: Maximum number of entries
    """

    def __init__(self, capacity: int, name: str = 'cache'):
        """
        Initialize bounded cache.

        Args:
            capacity: Maximum number of entries (at least 1)
            name: Cache name used in logs

        Raises:
            ValueError: If capacity is less than 1
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")

        self.name = name
        self.capacity = capacity
        self._entries: Dict[K, V] = {}
        self._insertion_order: Deque[K] = deque()

    def get(self, key: K) -> Optional[V]:
        """
        Look up a cached value.

        Args:
            key: Cache key

        Returns:
            Cached value or None on a miss
        """
        return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        """
        Insert or replace a value.

        A new key is appended to the eviction queue; replacing the value of
        a key already present keeps its original queue position.

        Args:
            key: Cache key
            value: Value to store
        """
        if key not in self._entries:
            self._insertion_order.append(key)
        self._entries[key] = value
        self.evict_if_over_capacity()

    def evict_if_over_capacity(self) -> int:
        """
        Evict the oldest inserted keys until size is within capacity.

        Returns:
            Number of evicted entries
        """
        evicted = 0
        while len(self._insertion_order) > self.capacity:
            oldest = self._insertion_order.popleft()
            self._entries.pop(oldest, None)
            evicted += 1

        if evicted:
            logger.debug(f"{self.name}: evicted {evicted} entries (size={len(self)})")
        return evicted

    def clear(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries removed
        """
        size = len(self._entries)
        self._entries.clear()
        self._insertion_order.clear()
        logger.info(f"{self.name}: cleared {size} entries")
        return size

    def keys_in_eviction_order(self):
        """Keys from oldest to newest insertion."""
        return list(self._insertion_order)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
