"""
FlightMap Backend Package.

Live aircraft positions for a map viewer, built with Flask, requests and NumPy.

Modules:
    api/          REST endpoints for viewport flights, flight details and the Aviation Edge proxy
    models/       Dataclasses (BoundingBox, FlightState, FlightDetails)
    providers/    OpenSky and Aviation Edge clients behind one provider facade
    services/     Flight details and airport lookups for route overlays
    cache.py      Per-client result cache with a soft rate limit
    feed.py       Viewer session state: supersession and last-known-good flights
    filtering.py  Vectorized, dateline-aware viewport filter
    config.py     Centralized configuration from environment variables
"""

__version__ = '1.0.0'
