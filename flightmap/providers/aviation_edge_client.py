"""
Aviation Edge flight tracker client (radius search).

The upstream only understands a center point plus a radius, so a
viewport box is converted first:

    center = dateline-aware box centroid
    radius = ceil(max corner distance), clamped to 500 km

Boxes whose corners lie beyond the clamp lose their far corners. That
is an accepted approximation; the client never tiles several radius
queries to cover a large box.

By default the base URL points at our own proxy, which injects the
API key server-side. A key passed to the client directly is sent as
the `key` query parameter, for server-side use only.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional
from urllib.parse import urljoin

import requests

from flightmap.config import config
from flightmap.exceptions import UpstreamRequestError
from flightmap.models import BoundingBox, FlightState
from flightmap.providers.base import ProviderClient, clean_text, coerce_float

logger = logging.getLogger(__name__)

DEFAULT_PROXY_PATH = '/api/proxy/aviation-edge/flights'


@dataclass(frozen=True)
class RadiusQuery:
    """Center + radius search parameters."""
    lat: float
    lon: float
    distance_km: int

    def to_params(self) -> dict:
        return {
            'lat': self.lat,
            'lng': self.lon,
            'distance': self.distance_km,
        }


def resolve_url(base_url: str) -> str:
    """Resolve a server-relative URL (the proxy path) against the public base URL."""
    if base_url.startswith('/'):
        return urljoin(config.public_base_url, base_url)
    return base_url


def bbox_to_radius_query(bbox: BoundingBox, max_radius_km: float = 500) -> RadiusQuery:
    """Convert a viewport into the smallest radius search covering it, up to the clamp."""
    distance = math.ceil(bbox.max_corner_distance_km())
    distance = int(max(1, min(distance, max_radius_km)))

    return RadiusQuery(
        lat=bbox.center_latitude,
        lon=bbox.center_longitude,
        distance_km=distance,
    )


def _section(record: dict, name: str) -> dict:
    value = record.get(name)
    return value if isinstance(value, dict) else {}


def parse_flight(record: Any) -> Optional[FlightState]:
    """
    Map one nested Aviation Edge flight object into a FlightState.

    Absent sections and fields default to None. Returns None for
    entries that are not objects or carry no icao24.
    """
    if not isinstance(record, dict):
        return None

    aircraft = _section(record, 'aircraft')
    airline = _section(record, 'airline')
    departure = _section(record, 'departure')
    arrival = _section(record, 'arrival')
    flight = _section(record, 'flight')
    geography = _section(record, 'geography')
    speed = _section(record, 'speed')
    system = _section(record, 'system')

    icao24 = clean_text(aircraft.get('icao24'))
    if not icao24:
        return None

    flight_icao = clean_text(flight.get('icaoNumber'))
    flight_iata = clean_text(flight.get('iataNumber'))
    updated = coerce_float(system.get('updated'))
    is_ground = coerce_float(speed.get('isGround'))

    return FlightState(
        icao24=icao24.lower(),
        # ICAO flight number preferred over IATA
        callsign=flight_icao or flight_iata,
        latitude=coerce_float(geography.get('latitude')),
        longitude=coerce_float(geography.get('longitude')),
        altitude=coerce_float(geography.get('altitude')),
        velocity=coerce_float(speed.get('horizontal')),
        heading=coerce_float(geography.get('direction')),
        vertical_speed=coerce_float(speed.get('vspeed')),
        is_ground=int(is_ground) if is_ground is not None else None,
        status=clean_text(record.get('status')),
        squawk=clean_text(system.get('squawk')),
        updated=int(updated) if updated is not None else None,
        airline_iata=clean_text(airline.get('iataCode')),
        airline_icao=clean_text(airline.get('icaoCode')),
        flight_iata=flight_iata,
        flight_icao=flight_icao,
        aircraft_iata=clean_text(aircraft.get('iataCode')),
        aircraft_icao=clean_text(aircraft.get('icaoCode')),
        aircraft_reg=clean_text(aircraft.get('regNumber')),
        origin_iata=clean_text(departure.get('iataCode')),
        origin_icao=clean_text(departure.get('icaoCode')),
        destination_iata=clean_text(arrival.get('iataCode')),
        destination_icao=clean_text(arrival.get('icaoCode')),
    )


class AviationEdgeClient(ProviderClient):
    """
    Client for the Aviation Edge /flights radius endpoint.

    Response contract:
    - success: JSON array of nested flight objects
    - failure: {"error": "..."} (message propagated into the exception)
    """

    name = 'Aviation Edge'

    def __init__(
        self,
        base_url: str = DEFAULT_PROXY_PATH,
        api_key: Optional[str] = None,
        limit: Optional[int] = None,
        max_radius_km: Optional[float] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.base_url = resolve_url(base_url)
        self.api_key = api_key
        self.limit = limit
        self.max_radius_km = (
            max_radius_km if max_radius_km is not None
            else config.provider_cache.max_radius_km
        )

    def build_params(self, bbox: BoundingBox) -> dict:
        """Query parameters for bbox, including the key when one is held."""
        params = {}
        if self.api_key:
            params['key'] = self.api_key
        params.update(bbox_to_radius_query(bbox, self.max_radius_km).to_params())
        if self.limit:
            params['limit'] = self.limit
        return params

    def _fetch(self, bbox: BoundingBox) -> List[FlightState]:
        params = self.build_params(bbox)
        logger.debug(
            f'Fetching Aviation Edge flights near ({params["lat"]:.3f}, {params["lng"]:.3f}) '
            f'within {params["distance"]}km'
        )

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            # The exception text may contain the request URL and therefore the key
            logger.error(f'Aviation Edge request failed: {type(e).__name__}')
            raise UpstreamRequestError('Aviation Edge request failed') from e

        if not response.ok:
            logger.error(f'Aviation Edge API error: {response.status_code}')
            raise UpstreamRequestError(
                'Aviation Edge request failed', status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error('Aviation Edge returned a non-JSON body')
            raise UpstreamRequestError('Aviation Edge request failed') from e

        if not isinstance(data, list):
            message = data.get('error') if isinstance(data, dict) else None
            if not isinstance(message, str):
                message = 'Aviation Edge request failed'
            logger.warning(f'Aviation Edge API error: {message}')
            raise UpstreamRequestError(message)

        flights = []
        for record in data:
            state = parse_flight(record)
            if state:
                flights.append(state)

        logger.debug(f'Parsed {len(flights)} of {len(data)} Aviation Edge records')
        return flights
