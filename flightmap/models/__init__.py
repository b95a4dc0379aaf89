"""
Data models for FlightMap.

Plain dataclasses, no persistence:
1. BoundingBox - dateline-aware viewport
2. FlightState - canonical per-aircraft record
3. FlightDetails - route overlay for a selected flight
"""

from flightmap.models.bbox import BoundingBox, haversine_distance, normalize_longitude
from flightmap.models.flight_state import Airport, FlightDetails, FlightState, LatLng

__all__ = [
    'BoundingBox',
    'haversine_distance',
    'normalize_longitude',
    'Airport',
    'FlightDetails',
    'FlightState',
    'LatLng',
]
