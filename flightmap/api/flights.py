"""
Flight data API endpoints.

Provides endpoints for:
- GET /api/flights - Flights inside a viewport
- GET /api/flights/<icao24>/details - Route details for a selected flight
- GET /api/provider - Identity and attribution of the active provider
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from flightmap.exceptions import InvalidBoundsError
from flightmap.filtering import filter_by_bbox
from flightmap.models import BoundingBox, FlightState
from flightmap.services.flight_details import format_route

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api')

BOUND_PARAMS = ('south', 'west', 'north', 'east')


@flights_bp.route('/flights', methods=['GET'])
def list_flights():
    """
    List flights inside the viewport.

    Query parameters:
    - south, west, north, east: raw map bounds (required); longitudes may
      exceed +/-180 and west > east marks a dateline-crossing view
    - center: raw map center longitude (optional); when given each flight
      also carries displayLongitude in the same world copy

    Response includes query timing for latency awareness.
    """
    start_time = time.perf_counter()

    missing = [name for name in BOUND_PARAMS if not request.args.get(name)]
    if missing:
        return jsonify({'error': f'Missing required parameters: {", ".join(BOUND_PARAMS)}'}), 400

    try:
        bounds = {name: float(request.args[name]) for name in BOUND_PARAMS}
        center = request.args.get('center')
        center = float(center) if center else None
    except ValueError:
        return jsonify({'error': 'Bounds must be numbers'}), 400

    try:
        bbox = BoundingBox.from_raw_bounds(view_center_longitude=center, **bounds)
    except InvalidBoundsError as e:
        return jsonify({'error': str(e)}), 400

    provider = current_app.config['FLIGHT_PROVIDER']
    feed = current_app.config['FLIGHT_FEED']

    # The feed keeps its last good list on failure; this request still fails
    update = feed.refresh(bbox)
    if update.error is not None:
        return jsonify({'error': 'Failed to load flights'}), 502
    if not update.applied:
        logger.debug(f'Refresh {update.generation} superseded by a newer viewport')

    visible = filter_by_bbox(update.flights, bbox)

    flight_dicts = []
    for flight in visible:
        flight_dict = flight.to_dict()
        if center is not None:
            flight_dict['displayLongitude'] = bbox.project_longitude(flight.longitude)
        flight_dicts.append(flight_dict)

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'flights': flight_dicts,
        'count': len(flight_dicts),
        'bbox': bbox.to_dict(),
        'provider': provider.to_dict(),
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })


@flights_bp.route('/flights/<icao24>/details', methods=['GET'])
def get_flight_details(icao24: str):
    """
    Route details for one flight.

    Includes a route summary line ('KSFO → KDEN', '??? → ???' when unknown).
    """
    icao24 = icao24.lower()
    details = current_app.config['DETAILS_PROVIDER'].get_flight_details(icao24)

    if details is None:
        return jsonify({'error': 'Flight not found'}), 404

    lookup = current_app.config.get('FLIGHT_LOOKUP')
    flight = lookup(icao24) if lookup else None

    result = details.to_dict()
    result['route'] = format_route(flight or FlightState(icao24=icao24), details)

    return jsonify(result)


@flights_bp.route('/provider', methods=['GET'])
def get_provider():
    """Identity and attribution line of the active flight provider."""
    return jsonify(current_app.config['FLIGHT_PROVIDER'].to_dict())
