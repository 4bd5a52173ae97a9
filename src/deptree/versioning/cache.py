"""In-process cache with a freshness window for registry metadata.

Entries past their freshness window are kept and reported as stale so callers
can serve them while a refresh runs (stale-while-revalidate). Only the entry
count bound evicts data.
"""

from __future__ import annotations

import threading
import time
from itertools import islice
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, Protocol, TypeVar

from ..constants import Constants

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A single cached value and the moment it stops being fresh."""

    value: T
    fresh_until: float
    created_at: float = field(default_factory=time.time)

    def is_fresh(self, now: Optional[float] = None) -> bool:
        """Check whether this entry is still inside its freshness window."""
        return (now if now is not None else time.time()) <= self.fresh_until


class MetadataCache(Protocol[T]):
    """Interface the packument fetcher relies on; tests substitute fakes."""

    def get(self, key: str) -> Optional[CacheEntry[T]]:
        ...

    def set(self, key: str, value: T, max_age: Optional[float] = None) -> None:
        ...

    def is_fresh(self, entry: CacheEntry[T]) -> bool:
        ...

    def clear(self) -> None:
        ...


class TTLCache(Generic[T]):
    """Thread-safe in-memory cache keyed by exact string.

    Shared by overlapping resolutions, possibly from different threads each
    running its own event loop, hence the lock.
    """

    def __init__(
        self,
        max_age: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            max_age: Freshness window in seconds.
            max_entries: Upper bound on stored entries.
            clock: Time source, injectable for tests.
        """
        self._max_age = max_age if max_age is not None else Constants.PACKUMENT_CACHE_MAX_AGE_SEC
        self._max_entries = (
            max_entries if max_entries is not None else Constants.PACKUMENT_CACHE_MAX_ENTRIES
        )
        self._clock = clock
        self._cache: Dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry[T]]:
        """Return the entry for ``key``, fresh or stale, or None."""
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, value: T, max_age: Optional[float] = None) -> None:
        """Store ``value``, replacing any previous entry for ``key``."""
        now = self._clock()
        effective_age = max_age if max_age is not None else self._max_age
        entry = CacheEntry(value=value, fresh_until=now + effective_age, created_at=now)
        with self._lock:
            # Re-insert so dict order stays oldest-first
            self._cache.pop(key, None)
            self._cache[key] = entry
            if len(self._cache) > self._max_entries:
                self._evict_oldest(max(1, self._max_entries // 10, len(self._cache) - self._max_entries))

    def is_fresh(self, entry: CacheEntry[T]) -> bool:
        return entry.is_fresh(self._clock())

    def invalidate(self, key: str) -> None:
        """Drop a single entry."""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        now = self._clock()
        with self._lock:
            stale = sum(1 for e in self._cache.values() if not e.is_fresh(now))
            total = len(self._cache)
        return {
            "total_entries": total,
            "stale_entries": stale,
            "fresh_entries": total - stale,
            "max_entries": self._max_entries,
            "max_age": self._max_age,
        }

    def _evict_oldest(self, count: int) -> None:
        """Evict the ``count`` oldest entries. Caller holds the lock."""
        for key in list(islice(self._cache, count)):
            del self._cache[key]
