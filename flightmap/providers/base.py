"""
Shared machinery for flight data provider clients.

Every client turns a BoundingBox into upstream requests, maps the
payload into FlightState records and hands back a deduplicated list.
The base class owns the policies both variants share:

- Deduplication by icao24 (last occurrence wins)
- Result caching for identical boxes
- Soft rate limiting against the last network fetch
- One in-flight fetch per client

Errors are never retried here; they propagate to the caller, which is
expected to keep showing its last good list.
"""

import logging
import threading
from typing import Callable, Iterable, List, Optional

import requests

from flightmap.cache import ProviderCache
from flightmap.config import config
from flightmap.models import BoundingBox, FlightState

logger = logging.getLogger(__name__)


def dedupe_flights(flights: Iterable[FlightState]) -> List[FlightState]:
    """
    Collapse records sharing an icao24.

    The last record wins but keeps the position of the first occurrence.
    """
    unique = {}
    for flight in flights:
        unique[flight.icao24] = flight
    return list(unique.values())


def coerce_float(value) -> Optional[float]:
    """Numeric field or None; junk values become None rather than raising."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def clean_text(value) -> Optional[str]:
    """Trimmed string or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ProviderClient:
    """
    Base class for provider clients.

    Subclasses implement _fetch(bbox) returning mapped (not yet
    deduplicated) FlightState records.
    """

    name = 'provider'

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        cache_seconds: Optional[float] = None,
        min_refetch_seconds: Optional[float] = None,
        timeout: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else config.http.timeout_seconds
        self.cache = ProviderCache(
            cache_seconds=(
                cache_seconds if cache_seconds is not None
                else config.provider_cache.cache_seconds
            ),
            min_refetch_seconds=(
                min_refetch_seconds if min_refetch_seconds is not None
                else config.provider_cache.min_refetch_seconds
            ),
            clock=clock,
        )

        self._fetch_lock = threading.Lock()
        self._fetch_count = 0
        self._error_count = 0

    def get_states(self, bbox: BoundingBox) -> List[FlightState]:
        """
        Current flights for bbox.

        Returns the cached result when the cache or the refetch floor
        allows it; otherwise fetches, deduplicates and caches.

        Raises:
            UpstreamRequestError on non-success or malformed responses
        """
        with self._fetch_lock:
            key = bbox.cache_key()

            cached = self.cache.lookup(key)
            if cached is not None:
                return cached

            started = self.cache.clock()
            try:
                mapped = self._fetch(bbox)
            except Exception:
                self._error_count += 1
                raise

            flights = dedupe_flights(mapped)
            self.cache.store(key, flights, fetched_at=started)
            self._fetch_count += 1

            logger.info(f'{self.name}: {len(flights)} flights for {key}')
            return flights

    def _fetch(self, bbox: BoundingBox) -> List[FlightState]:
        raise NotImplementedError

    @property
    def stats(self) -> dict:
        """Get client statistics."""
        return {
            'fetch_count': self._fetch_count,
            'error_count': self._error_count,
            'cache': self.cache.stats,
        }
