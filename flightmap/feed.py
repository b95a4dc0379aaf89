"""
Flight feed - the flight list one viewer is currently looking at.

Ties a FlightProvider to a stream of viewport changes:

1. Every refresh takes a new generation number
2. The provider is queried (clients serialize their own fetches)
3. The result is applied only if no newer refresh or cancel happened
   meanwhile; a superseded result is dropped, never shown
4. A failed refresh flags the error but keeps the last good flights

This mirrors what the map viewer does client-side, so the HTTP layer
and tests can drive the same rules.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from flightmap.exceptions import FlightMapError
from flightmap.filtering import filter_by_bbox
from flightmap.models import BoundingBox, FlightState
from flightmap.providers import FlightProvider

logger = logging.getLogger(__name__)


@dataclass
class FeedUpdate:
    """Outcome of one refresh."""
    generation: int
    applied: bool
    flights: List[FlightState] = field(default_factory=list)
    error: Optional[Exception] = None


class FlightFeed:
    """
    Viewer session state: current box, last good flights, error flag.

    Safe to call from several threads; only the newest refresh wins.
    """

    def __init__(self, provider: FlightProvider):
        self.provider = provider

        self._lock = threading.RLock()
        self._generation = 0
        self._bbox: Optional[BoundingBox] = None
        self._flights: List[FlightState] = []
        self._error: Optional[Exception] = None
        self._loading = False

        # Statistics
        self._applied_count = 0
        self._discarded_count = 0
        self._error_count = 0

        # Callbacks for external integration
        self._on_update_callbacks: List[Callable[[List[FlightState]], None]] = []

    def add_update_callback(self, callback: Callable[[List[FlightState]], None]) -> None:
        """
        Register callback to be invoked after each applied refresh.

        Callback receives the new flight list.
        """
        self._on_update_callbacks.append(callback)

    # -------------------------------------------------------------------------
    # Refresh lifecycle
    # -------------------------------------------------------------------------

    def _begin(self, bbox: Optional[BoundingBox]) -> int:
        with self._lock:
            self._generation += 1
            self._bbox = bbox
            self._loading = bbox is not None
            return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def cancel(self) -> None:
        """Abandon any in-flight refresh; its result will be discarded."""
        with self._lock:
            self._generation += 1
            self._loading = False

    def refresh(self, bbox: Optional[BoundingBox]) -> FeedUpdate:
        """
        Query the provider for bbox and apply the result if still relevant.

        A None bbox clears the feed (no viewport, nothing to show).
        """
        generation = self._begin(bbox)

        if bbox is None:
            with self._lock:
                self._flights = []
                self._error = None
            return FeedUpdate(generation=generation, applied=True)

        try:
            flights = self.provider.get_states(bbox)
        except FlightMapError as e:
            with self._lock:
                if not self._is_current(generation):
                    self._discarded_count += 1
                    logger.debug(f'Dropping stale error from refresh {generation}')
                    return FeedUpdate(generation=generation, applied=False, error=e)

                self._error = e
                self._loading = False
                self._error_count += 1
                logger.warning(f'{self.provider.name} API request failed: {e}')
                # Keep showing the last good list
                return FeedUpdate(
                    generation=generation, applied=True, flights=self._flights, error=e
                )

        with self._lock:
            if not self._is_current(generation):
                self._discarded_count += 1
                logger.debug(f'Dropping superseded refresh {generation}')
                return FeedUpdate(generation=generation, applied=False, flights=flights)

            self._flights = flights
            self._error = None
            self._loading = False
            self._applied_count += 1

        for callback in self._on_update_callbacks:
            try:
                callback(flights)
            except Exception as e:
                logger.error(f'Update callback error: {e}')

        return FeedUpdate(generation=generation, applied=True, flights=flights)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def flights(self) -> List[FlightState]:
        with self._lock:
            return list(self._flights)

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def bbox(self) -> Optional[BoundingBox]:
        return self._bbox

    def visible_flights(self) -> List[FlightState]:
        """Flights inside the current viewport."""
        with self._lock:
            if self._bbox is None:
                return []
            return filter_by_bbox(self._flights, self._bbox)

    def find(self, icao24: str) -> Optional[FlightState]:
        """Latest state for one aircraft, if it is in the feed."""
        icao24 = icao24.lower()
        with self._lock:
            for flight in self._flights:
                if flight.icao24 == icao24:
                    return flight
        return None

    @property
    def stats(self) -> dict:
        """Get feed statistics."""
        with self._lock:
            return {
                'generation': self._generation,
                'applied_count': self._applied_count,
                'discarded_count': self._discarded_count,
                'error_count': self._error_count,
                'flight_count': len(self._flights),
                'loading': self._loading,
            }
