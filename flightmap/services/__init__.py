"""
Supporting services.

Flight detail lookups for the selected marker, with an embedded airport
table so route overlays work without another upstream call.
"""

from flightmap.services.flight_details import (
    FlightDetailsProvider,
    MockFlightDetailsProvider,
    RouteDetailsProvider,
    format_route,
    lookup_airport,
)

__all__ = [
    'FlightDetailsProvider',
    'MockFlightDetailsProvider',
    'RouteDetailsProvider',
    'format_route',
    'lookup_airport',
]
