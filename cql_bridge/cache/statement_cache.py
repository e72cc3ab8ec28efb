"""Bounded, thread-safe cache of parsed statements."""

import logging
import threading
from collections import OrderedDict
from concurrent.futures import Future
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

from ..errors import UnexpectedError

logger = logging.getLogger(__name__)

V = TypeVar("V")


class StatementCache(Generic[V]):
    """Get-or-compute cache with LRU eviction.

    Concurrent lookups of the same missing key run ``compute`` once; the
    other callers wait for that result. A failed computation is reported
    to every waiting caller and nothing is stored.
    """

    def __init__(self, capacity: int = 1000):
        """Initialize cache.

        Args:
            capacity: Maximum number of entries kept
        """
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: "OrderedDict[Hashable, V]" = OrderedDict()
        self._pending: Dict[Hashable, Future] = {}
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def peek(self, key: Hashable) -> Optional[V]:
        """Return the cached value without computing or touching recency."""
        with self._lock:
            return self._entries.get(key)

    def get(self, key: Hashable, compute: Callable[[], V]) -> V:
        """Return the cached value for ``key``, computing it on a miss.

        Args:
            key: Cache key
            compute: Zero-argument callable producing the value

        Returns:
            Cached or freshly computed value

        Raises:
            UnexpectedError: when ``compute`` raised; the cause is chained
        """
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                return self._entries[key]
            future = self._pending.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._pending[key] = future

        if not owner:
            return future.result()

        logger.debug(f"Statement cache miss, {len(self._pending)} computation(s) in flight")
        try:
            value = compute()
        except Exception as e:
            with self._lock:
                del self._pending[key]
            error = UnexpectedError(f"Failed to compute cache entry: {e}")
            error.__cause__ = e
            future.set_exception(error)
            raise error from e

        with self._lock:
            self._store(key, value)
            del self._pending[key]
        future.set_result(value)
        return value

    def invalidate(self, key: Hashable) -> bool:
        """Drop one entry; returns whether it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _store(self, key: Hashable, value: V) -> None:
        """Insert under the lock, evicting least recently used entries."""
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted statement cache entry: {evicted!r}")
