"""
Flight data providers for FlightMap.

Two upstream variants behind one facade:
- OpenSky: bulk state vectors queried by bounding box
- Aviation Edge: nested flight objects queried by center + radius
"""

from flightmap.providers.aviation_edge_client import AviationEdgeClient
from flightmap.providers.base import ProviderClient, dedupe_flights
from flightmap.providers.facade import (
    AVIATION_EDGE,
    OPENSKY,
    FlightProvider,
    ProviderConfig,
    ProviderParams,
    create_flight_provider,
)
from flightmap.providers.opensky_client import OpenSkyClient
from flightmap.providers.runtime_config import FALLBACK_PROVIDER, load_runtime_provider

__all__ = [
    'AviationEdgeClient',
    'OpenSkyClient',
    'ProviderClient',
    'dedupe_flights',
    'AVIATION_EDGE',
    'OPENSKY',
    'FlightProvider',
    'ProviderConfig',
    'ProviderParams',
    'create_flight_provider',
    'FALLBACK_PROVIDER',
    'load_runtime_provider',
]
