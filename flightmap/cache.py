"""
Per-client result cache for flight data providers.

Each provider client owns one ProviderCache. It remembers only the last
query: the bounding box key, the mapped flights and when the network
fetch happened. Two policies read it:

- Cache hit: same key within cache_seconds returns the stored result.
- Soft rate limit: any key within min_refetch_seconds of the last
  network fetch returns the stored (possibly stale) result. Free-tier
  upstreams throttle aggressively, so a stale map beats a 429.

Failed fetches never touch the cache.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Hashable, List, Optional

from flightmap.models import FlightState

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """The last successful query."""
    key: Hashable
    flights: List[FlightState]
    fetched_at: float


class ProviderCache:
    """
    Single-entry cache with a freshness window and a refetch floor.

    Thread-safe for reads and writes; callers serialize fetches themselves.
    """

    def __init__(
        self,
        cache_seconds: float = 10.0,
        min_refetch_seconds: float = 5.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.cache_seconds = cache_seconds
        self.min_refetch_seconds = min_refetch_seconds
        self.clock = clock or time.time

        self._entry: Optional[CacheEntry] = None
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._throttled = 0
        self._misses = 0

    def lookup(self, key: Hashable) -> Optional[List[FlightState]]:
        """
        Return a stored result if either policy allows skipping the network.

        Returns None when a fetch should happen.
        """
        now = self.clock()

        with self._lock:
            entry = self._entry
            if entry is None:
                self._misses += 1
                return None

            age = now - entry.fetched_at

            if entry.key == key and age < self.cache_seconds:
                self._hits += 1
                return entry.flights

            if age < self.min_refetch_seconds:
                self._throttled += 1
                logger.debug(f'Refetch throttled: last fetch {age:.1f}s ago')
                return entry.flights

        self._misses += 1
        return None

    def store(
        self,
        key: Hashable,
        flights: List[FlightState],
        fetched_at: Optional[float] = None,
    ) -> None:
        """
        Record the result of a network fetch.

        fetched_at is when the fetch started; defaults to now. Both
        windows are measured from it.
        """
        if fetched_at is None:
            fetched_at = self.clock()
        with self._lock:
            self._entry = CacheEntry(key=key, flights=flights, fetched_at=fetched_at)

    @property
    def last_result(self) -> List[FlightState]:
        with self._lock:
            return self._entry.flights if self._entry else []

    def clear(self) -> None:
        """Forget the stored result."""
        with self._lock:
            self._entry = None

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._throttled + self._misses
            return {
                'hits': self._hits,
                'throttled': self._throttled,
                'misses': self._misses,
                'hit_rate': (self._hits + self._throttled) / total if total > 0 else 0,
                'last_fetch': self._entry.fetched_at if self._entry else None,
            }
