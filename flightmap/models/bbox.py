"""
Geographic bounding box for viewport queries.

A box is rectangular in lat/lon space and may wrap across the antimeridian:
min_lon > max_lon is legal and means the box covers [min_lon, 180] plus
[-180, max_lon]. Providers expect:

    OpenSky:       lamin, lomin, lamax, lomax (never wrapping)
    Aviation Edge: lat, lng, distance (center + radius in km)

Longitudes are stored normalized into (-180, 180].
"""

import math
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from flightmap.exceptions import InvalidBoundsError

EARTH_RADIUS_KM = 6371.0


def normalize_longitude(lon: float) -> float:
    """
    Wrap a longitude into (-180, 180].

    Map libraries report bounds beyond +/-180 once the user pans across
    world copies; this collapses them back to canonical form.
    """
    wrapped = ((lon % 360 + 540) % 360) - 180
    if wrapped == -180:
        return 180.0
    return float(wrapped)


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points in kilometers.

    Uses the Haversine formula for accuracy over short to medium distances.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def _require_finite(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidBoundsError(f'Invalid bounds: {name} is not a number')
    if not math.isfinite(value):
        raise InvalidBoundsError(f'Invalid bounds: {name} is not finite')
    return value


@dataclass(frozen=True)
class BoundingBox:
    """
    Viewport bounding box.

    Built fresh on every viewport change and discarded once the
    triggering query completes. view_center_longitude is the raw map
    center (possibly outside +/-180) and does not take part in equality.
    """
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float
    wraps_dateline: bool = False
    view_center_longitude: Optional[float] = field(default=None, compare=False)

    def __post_init__(self):
        for name in ('min_lat', 'max_lat', 'min_lon', 'max_lon'):
            _require_finite(name, getattr(self, name))
        if self.view_center_longitude is not None:
            _require_finite('view_center_longitude', self.view_center_longitude)

        if self.min_lat > self.max_lat:
            raise InvalidBoundsError(
                f'Invalid bounds: min_lat {self.min_lat} > max_lat {self.max_lat}'
            )
        if self.min_lon > self.max_lon and not self.wraps_dateline:
            object.__setattr__(self, 'wraps_dateline', True)

    @classmethod
    def from_raw_bounds(
        cls,
        south: float,
        west: float,
        north: float,
        east: float,
        view_center_longitude: Optional[float] = None,
    ) -> 'BoundingBox':
        """
        Build a box from raw screen-projected map bounds.

        Raises InvalidBoundsError when south > north or any value (the
        view center included) is not finite. west > east after
        normalization yields a dateline-wrapping box, not an error.
        """
        south = _require_finite('south', south)
        north = _require_finite('north', north)
        west = _require_finite('west', west)
        east = _require_finite('east', east)
        if view_center_longitude is not None:
            view_center_longitude = _require_finite('center', view_center_longitude)

        if south > north:
            raise InvalidBoundsError(f'Invalid bounds: south {south} > north {north}')

        if east - west >= 360:
            # Zoomed out past a full world width
            min_lon, max_lon = -180.0, 180.0
        else:
            min_lon = normalize_longitude(west)
            max_lon = normalize_longitude(east)
            # A western edge on the antimeridian itself starts at -180
            if min_lon == 180.0 and max_lon < 180.0:
                min_lon = -180.0

        return cls(
            min_lat=south,
            max_lat=north,
            min_lon=min_lon,
            max_lon=max_lon,
            wraps_dateline=min_lon > max_lon,
            view_center_longitude=view_center_longitude,
        )

    # -------------------------------------------------------------------------
    # Derived geometry
    # -------------------------------------------------------------------------

    @property
    def center_latitude(self) -> float:
        return (self.min_lat + self.max_lat) / 2

    @property
    def center_longitude(self) -> float:
        """Center longitude, averaged across the dateline for wrapping boxes."""
        east = self.max_lon + 360 if self.wraps_dateline else self.max_lon
        return normalize_longitude((self.min_lon + east) / 2)

    @property
    def corners(self) -> List[Tuple[float, float]]:
        """The four (lat, lon) corners."""
        return [
            (self.min_lat, self.min_lon),
            (self.min_lat, self.max_lon),
            (self.max_lat, self.min_lon),
            (self.max_lat, self.max_lon),
        ]

    def max_corner_distance_km(self) -> float:
        """
        Largest great-circle distance from the center to any corner.

        Haversine only sees the longitude delta through sin^2, so west and
        east corners on either side of the dateline measure the same no
        matter which world copy they are expressed in.
        """
        center_lat = self.center_latitude
        center_lon = self.center_longitude
        return max(
            haversine_distance(center_lat, center_lon, lat, lon)
            for lat, lon in self.corners
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def contains(self, lat: Optional[float], lon: Optional[float]) -> bool:
        """Closed-interval point test, wrap-aware."""
        if lat is None or lon is None:
            return False
        if not (self.min_lat <= lat <= self.max_lat):
            return False
        if self.wraps_dateline:
            return lon >= self.min_lon or lon <= self.max_lon
        return self.min_lon <= lon <= self.max_lon

    def segments(self) -> List['BoundingBox']:
        """Split into non-wrapping boxes (one, or two for a wrapping box)."""
        if not self.wraps_dateline:
            return [self]
        return [
            replace(self, min_lon=self.min_lon, max_lon=180.0, wraps_dateline=False),
            replace(self, min_lon=-180.0, max_lon=self.max_lon, wraps_dateline=False),
        ]

    def project_longitude(self, lon: float) -> float:
        """
        Shift a longitude into the world copy of the visible map center.

        Returns lon unchanged when no view center is known.
        """
        if self.view_center_longitude is None:
            return lon
        turns = round((self.view_center_longitude - lon) / 360)
        return lon + 360 * turns

    def cache_key(self) -> Tuple[float, float, float, float, bool]:
        return (self.min_lat, self.max_lat, self.min_lon, self.max_lon, self.wraps_dateline)

    def to_dict(self) -> dict:
        return {
            'minLat': self.min_lat,
            'maxLat': self.max_lat,
            'minLon': self.min_lon,
            'maxLon': self.max_lon,
            'wrapsDateline': self.wraps_dateline,
            'viewCenterLng': self.view_center_longitude,
        }
