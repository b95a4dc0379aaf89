"""
API module for FlightMap.

Provides REST endpoints for:
- Flight data (viewport queries, selected flight details)
- The credential-hiding Aviation Edge proxy
"""

from flightmap.api.flights import flights_bp
from flightmap.api.proxy import proxy_bp

__all__ = ['flights_bp', 'proxy_bp']
