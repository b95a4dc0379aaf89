"""
Flight details service - route overlay data for a selected flight.

Produces FlightDetails (origin, destination, waypoint path) on demand
when the viewer selects a marker. Nothing is cached beyond the current
selection; the viewer asks again when the selection changes.

Two providers:
- RouteDetailsProvider: builds the route from the flight's own airport
  codes (filled by the radius-search upstream) and the airport table
- MockFlightDetailsProvider: canned routes for demos and end-to-end tests
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from flightmap.models import Airport, FlightDetails, FlightState, LatLng

logger = logging.getLogger(__name__)


# code -> (name, lat, lon); both IATA and ICAO codes are keys
AIRPORTS: Dict[str, Tuple[str, float, float]] = {
    'SFO': ('San Francisco Intl', 37.6213, -122.3790),
    'KSFO': ('San Francisco Intl', 37.6213, -122.3790),
    'LAX': ('Los Angeles Intl', 33.9416, -118.4085),
    'KLAX': ('Los Angeles Intl', 33.9416, -118.4085),
    'SEA': ('Seattle Tacoma Intl', 47.4502, -122.3088),
    'KSEA': ('Seattle Tacoma Intl', 47.4502, -122.3088),
    'DEN': ('Denver Intl', 39.8561, -104.6737),
    'KDEN': ('Denver Intl', 39.8561, -104.6737),
    'ORD': ("Chicago O'Hare Intl", 41.9742, -87.9073),
    'KORD': ("Chicago O'Hare Intl", 41.9742, -87.9073),
    'DFW': ('Dallas Fort Worth Intl', 32.8998, -97.0403),
    'KDFW': ('Dallas Fort Worth Intl', 32.8998, -97.0403),
    'ATL': ('Hartsfield-Jackson Atlanta Intl', 33.6407, -84.4277),
    'KATL': ('Hartsfield-Jackson Atlanta Intl', 33.6407, -84.4277),
    'JFK': ('John F Kennedy Intl', 40.6413, -73.7781),
    'KJFK': ('John F Kennedy Intl', 40.6413, -73.7781),
    'BOS': ('Boston Logan Intl', 42.3656, -71.0096),
    'KBOS': ('Boston Logan Intl', 42.3656, -71.0096),
    'MIA': ('Miami Intl', 25.7959, -80.2870),
    'KMIA': ('Miami Intl', 25.7959, -80.2870),
    'HNL': ('Daniel K Inouye Intl', 21.3187, -157.9225),
    'PHNL': ('Daniel K Inouye Intl', 21.3187, -157.9225),
    'ANC': ('Ted Stevens Anchorage Intl', 61.1743, -149.9962),
    'PANC': ('Ted Stevens Anchorage Intl', 61.1743, -149.9962),
    'YVR': ('Vancouver Intl', 49.1967, -123.1815),
    'CYVR': ('Vancouver Intl', 49.1967, -123.1815),
    'YYZ': ('Toronto Pearson Intl', 43.6777, -79.6248),
    'CYYZ': ('Toronto Pearson Intl', 43.6777, -79.6248),
    'LHR': ('London Heathrow', 51.4700, -0.4543),
    'EGLL': ('London Heathrow', 51.4700, -0.4543),
    'CDG': ('Paris Charles de Gaulle', 49.0097, 2.5479),
    'LFPG': ('Paris Charles de Gaulle', 49.0097, 2.5479),
    'FRA': ('Frankfurt am Main', 50.0379, 8.5622),
    'EDDF': ('Frankfurt am Main', 50.0379, 8.5622),
    'DXB': ('Dubai Intl', 25.2532, 55.3657),
    'OMDB': ('Dubai Intl', 25.2532, 55.3657),
    'SIN': ('Singapore Changi', 1.3644, 103.9915),
    'WSSS': ('Singapore Changi', 1.3644, 103.9915),
    'HND': ('Tokyo Haneda', 35.5494, 139.7798),
    'RJTT': ('Tokyo Haneda', 35.5494, 139.7798),
    'NRT': ('Tokyo Narita', 35.7720, 140.3929),
    'RJAA': ('Tokyo Narita', 35.7720, 140.3929),
    'SYD': ('Sydney Kingsford Smith', -33.9399, 151.1753),
    'YSSY': ('Sydney Kingsford Smith', -33.9399, 151.1753),
    'AKL': ('Auckland', -37.0082, 174.7850),
    'NZAA': ('Auckland', -37.0082, 174.7850),
    'NAN': ('Nadi Intl', -17.7554, 177.4431),
    'NFFN': ('Nadi Intl', -17.7554, 177.4431),
}


def get_airport(code: Optional[str]) -> Optional[Airport]:
    """Airport for a single IATA or ICAO code, or None."""
    if not code:
        return None
    code = code.strip().upper()
    entry = AIRPORTS.get(code)
    if entry is None:
        return None
    name, lat, lon = entry
    return Airport(code=code, name=name, lat=lat, lon=lon)


def lookup_airport(iata: Optional[str] = None, icao: Optional[str] = None) -> Optional[Airport]:
    """Resolve an airport, trying the IATA code first."""
    return get_airport(iata) or get_airport(icao)


def format_route(flight: FlightState, details: Optional[FlightDetails] = None) -> str:
    """
    Human route summary, e.g. 'KSFO → KDEN'.

    Detail airports win over the flight's own codes; unknown ends
    show as '???'.
    """
    origin = (
        (details.origin.code if details and details.origin else None)
        or flight.origin_iata
        or flight.origin_icao
    )
    destination = (
        (details.destination.code if details and details.destination else None)
        or flight.destination_iata
        or flight.destination_icao
    )
    return f'{origin or "???"} → {destination or "???"}'


class FlightDetailsProvider:
    """Base class: look up details for a selected flight."""

    def get_flight_details(self, icao24: str) -> Optional[FlightDetails]:
        raise NotImplementedError


class RouteDetailsProvider(FlightDetailsProvider):
    """
    Details derived from the flight's current state.

    flight_lookup returns the latest FlightState for an icao24 (or None).
    The path runs origin -> current position -> destination, skipping
    whichever points are unknown.
    """

    def __init__(self, flight_lookup: Callable[[str], Optional[FlightState]]):
        self.flight_lookup = flight_lookup

    def get_flight_details(self, icao24: str) -> Optional[FlightDetails]:
        flight = self.flight_lookup(icao24.lower())
        if flight is None:
            logger.debug(f'No current state for {icao24}')
            return None

        origin = lookup_airport(flight.origin_iata, flight.origin_icao)
        destination = lookup_airport(flight.destination_iata, flight.destination_icao)

        path = []
        if origin:
            path.append(LatLng(origin.lat, origin.lon))
        if flight.has_position():
            path.append(LatLng(flight.latitude, flight.longitude))
        if destination:
            path.append(LatLng(destination.lat, destination.lon))

        return FlightDetails(
            icao24=flight.icao24,
            callsign=flight.callsign,
            origin=origin,
            destination=destination,
            path=path,
        )


MOCK_DATA: Dict[str, FlightDetails] = {
    'abc123': FlightDetails(
        icao24='abc123',
        callsign='TEST123',
        origin=Airport('KSFO', 'San Francisco Intl', 37.6213, -122.3790),
        destination=Airport('KDEN', 'Denver Intl', 39.8561, -104.6737),
        path=[
            LatLng(37.6213, -122.3790),
            LatLng(38.5, -121.5),
            LatLng(39.1, -120.8),
        ],
    ),
    'def456': FlightDetails(
        icao24='def456',
        callsign='TEST456',
        origin=Airport('KLAX', 'Los Angeles Intl', 33.9416, -118.4085),
        destination=Airport('KSEA', 'Seattle Tacoma Intl', 47.4502, -122.3088),
        path=[
            LatLng(33.9416, -118.4085),
            LatLng(36.5, -120.0),
            LatLng(39.2, -121.0),
            LatLng(42.0, -122.0),
            LatLng(47.4502, -122.3088),
        ],
    ),
}


class MockFlightDetailsProvider(FlightDetailsProvider):
    """Canned details with an artificial delay to mimic a network lookup."""

    def __init__(self, delay_seconds: float = 0.1):
        self.delay_seconds = delay_seconds

    def get_flight_details(self, icao24: str) -> Optional[FlightDetails]:
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)
        return MOCK_DATA.get(icao24.lower())
