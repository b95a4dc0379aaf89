"""
Canonical flight records shared by every provider.

FlightState is the unified per-aircraft schema both upstream APIs map
into. Field names are snake_case here and camelCase on the wire, matching
what the map viewer consumes.

Design notes:
- One record per icao24 per query result (see providers.base.dedupe_flights)
- Any telemetry value may be None if the upstream did not report it
- A record without a position is kept but never spatially matchable
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class FlightState:
    """
    Current state of a single aircraft.

    The core fields are always rendered. Enrichment fields are only
    filled by the radius-search provider and are rendered when set.
    """
    icao24: str
    callsign: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    velocity: Optional[float] = None
    heading: Optional[float] = None

    # Enrichment
    vertical_speed: Optional[float] = None
    is_ground: Optional[int] = None
    status: Optional[str] = None
    squawk: Optional[str] = None
    updated: Optional[int] = None  # epoch seconds
    airline_iata: Optional[str] = None
    airline_icao: Optional[str] = None
    flight_iata: Optional[str] = None
    flight_icao: Optional[str] = None
    aircraft_iata: Optional[str] = None
    aircraft_icao: Optional[str] = None
    aircraft_reg: Optional[str] = None
    origin_iata: Optional[str] = None
    origin_icao: Optional[str] = None
    destination_iata: Optional[str] = None
    destination_icao: Optional[str] = None

    def __repr__(self) -> str:
        return f'<FlightState {self.icao24} {self.callsign or "?"} @ {self.latitude},{self.longitude}>'

    def has_position(self) -> bool:
        """Check if this state has valid position data."""
        return self.latitude is not None and self.longitude is not None

    @property
    def display_callsign(self) -> str:
        """Callsign for display, with fallback."""
        return self.callsign or self.icao24

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        result = {
            'icao24': self.icao24,
            'callsign': self.callsign,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'altitude': self.altitude,
            'velocity': self.velocity,
            'heading': self.heading,
        }

        enrichment = {
            'verticalSpeed': self.vertical_speed,
            'isGround': self.is_ground,
            'status': self.status,
            'squawk': self.squawk,
            'updated': self.updated,
            'airlineIata': self.airline_iata,
            'airlineIcao': self.airline_icao,
            'flightIata': self.flight_iata,
            'flightIcao': self.flight_icao,
            'aircraftIata': self.aircraft_iata,
            'aircraftIcao': self.aircraft_icao,
            'aircraftReg': self.aircraft_reg,
            'originIata': self.origin_iata,
            'originIcao': self.origin_icao,
            'destinationIata': self.destination_iata,
            'destinationIcao': self.destination_icao,
        }
        result.update({k: v for k, v in enrichment.items() if v is not None})

        return result


@dataclass(frozen=True)
class LatLng:
    lat: float
    lon: float

    def to_dict(self) -> dict:
        return {'lat': self.lat, 'lon': self.lon}


@dataclass(frozen=True)
class Airport:
    """Airport reference point for route overlays."""
    code: str
    name: str
    lat: float
    lon: float

    def to_dict(self) -> dict:
        return {'code': self.code, 'name': self.name, 'lat': self.lat, 'lon': self.lon}


@dataclass
class FlightDetails:
    """
    Per-flight enrichment produced when a flight is selected.

    path is an ordered list of waypoints and may be empty.
    """
    icao24: str
    callsign: Optional[str] = None
    origin: Optional[Airport] = None
    destination: Optional[Airport] = None
    path: List[LatLng] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'icao24': self.icao24,
            'callsign': self.callsign,
            'origin': self.origin.to_dict() if self.origin else None,
            'destination': self.destination.to_dict() if self.destination else None,
            'path': [point.to_dict() for point in self.path],
        }
