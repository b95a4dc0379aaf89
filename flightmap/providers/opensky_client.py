"""
OpenSky Network API client (bulk state vectors).

Handles communication with the OpenSky REST API, including:
- Optional authentication (higher rate limits)
- Bounding box queries, split in two across the dateline
- Positional state vector parsing

OpenSky state vector format (array indices):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max, space padded)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM
"""

import logging
from typing import Any, List, Optional, Sequence

import requests
from requests.auth import HTTPBasicAuth

from flightmap.config import config
from flightmap.exceptions import UpstreamRequestError
from flightmap.models import BoundingBox, FlightState
from flightmap.providers.base import ProviderClient, clean_text, coerce_float

logger = logging.getLogger(__name__)

ICAO24 = 0
CALLSIGN = 1
LAST_CONTACT = 4
LONGITUDE = 5
LATITUDE = 6
ON_GROUND = 8
VELOCITY = 9
TRUE_TRACK = 10
VERTICAL_RATE = 11
GEO_ALTITUDE = 13
SQUAWK = 14


def _at(arr: Sequence[Any], index: int) -> Any:
    return arr[index] if index < len(arr) else None


def parse_state_vector(arr: Sequence[Any]) -> Optional[FlightState]:
    """
    Parse an OpenSky state vector array into a FlightState.

    Missing trailing positions read as None. Returns None only when
    the row has no usable icao24.
    """
    if not isinstance(arr, (list, tuple)) or not arr:
        return None

    icao24 = clean_text(_at(arr, ICAO24))
    if not icao24:
        return None

    updated = coerce_float(_at(arr, LAST_CONTACT))
    on_ground = _at(arr, ON_GROUND)

    return FlightState(
        icao24=icao24.lower(),  # Normalize to lowercase
        callsign=clean_text(_at(arr, CALLSIGN)),
        latitude=coerce_float(_at(arr, LATITUDE)),
        longitude=coerce_float(_at(arr, LONGITUDE)),
        altitude=coerce_float(_at(arr, GEO_ALTITUDE)),
        velocity=coerce_float(_at(arr, VELOCITY)),
        heading=coerce_float(_at(arr, TRUE_TRACK)),
        vertical_speed=coerce_float(_at(arr, VERTICAL_RATE)),
        is_ground=None if on_ground is None else int(bool(on_ground)),
        squawk=clean_text(_at(arr, SQUAWK)),
        updated=int(updated) if updated is not None else None,
    )


class OpenSkyClient(ProviderClient):
    """
    Client for the OpenSky /states/all endpoint.

    A wrapping bounding box is never sent as one request: it is split
    into a western [min_lon, 180] and an eastern [-180, max_lon]
    segment whose results are concatenated before deduplication.
    """

    name = 'OpenSky'

    def __init__(
        self,
        base_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.base_url = base_url or config.opensky.base_url
        self.auth = None
        if username and password:
            self.auth = HTTPBasicAuth(username, password)
            logger.info('OpenSky client initialized with authentication')
        else:
            logger.info('OpenSky client running without authentication (lower rate limits)')

    def _fetch(self, bbox: BoundingBox) -> List[FlightState]:
        flights: List[FlightState] = []
        for segment in bbox.segments():
            flights.extend(self._fetch_segment(segment))
        return flights

    def _fetch_segment(self, bbox: BoundingBox) -> List[FlightState]:
        """Fetch one non-wrapping box."""
        params = {
            'lamin': bbox.min_lat,
            'lomin': bbox.min_lon,
            'lamax': bbox.max_lat,
            'lomax': bbox.max_lon,
        }

        logger.debug(f'Fetching states: {self.base_url} params={params}')

        try:
            response = self.session.get(
                self.base_url,
                params=params,
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f'OpenSky request failed: {e}')
            raise UpstreamRequestError('OpenSky request failed') from e

        if not response.ok:
            if response.status_code == 429:
                logger.warning('OpenSky rate limit exceeded')
            else:
                logger.error(f'OpenSky API error: {response.status_code}')
            raise UpstreamRequestError('OpenSky request failed', status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error('OpenSky returned a non-JSON body')
            raise UpstreamRequestError('OpenSky request failed') from e

        if not isinstance(data, dict):
            raise UpstreamRequestError('OpenSky request failed')

        states_raw = data.get('states') or []
        logger.debug(f'Received {len(states_raw)} state vectors from OpenSky')

        flights = []
        for arr in states_raw:
            state = parse_state_vector(arr)
            if state:
                flights.append(state)
        return flights
