"""
Secret-hiding proxy for the Aviation Edge API.

Provides:
- GET /api/proxy/aviation-edge/flights?lat&lng&distance&limit

The browser calls this endpoint without any credential. The proxy
validates the query, injects the server-held key as the `key` query
parameter and relays the upstream JSON. The key never appears in a
response body or error message: every failure class maps to a fixed,
generic message, and upstream error bodies are discarded.

App config used:
- AVIATION_EDGE_API_KEY: the credential (missing -> 500)
- AVIATION_EDGE_BASE_URL: upstream endpoint
- UPSTREAM_SESSION: requests.Session used for outbound calls
- HTTP_TIMEOUT: outbound timeout in seconds
"""

import logging
import math
from typing import Optional

import requests
from flask import Blueprint, current_app, jsonify, request

logger = logging.getLogger(__name__)

proxy_bp = Blueprint('proxy', __name__, url_prefix='/api/proxy')

MAX_DISTANCE_KM = 500
REDACTED = '***REDACTED***'


def redact_secret(text: str, secret: Optional[str]) -> str:
    """Scrub a credential out of text before it is logged."""
    if not secret:
        return text
    return text.replace(secret, REDACTED)


def _parse_number(value: str) -> Optional[float]:
    """Finite float or None."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _error(message: str, status: int):
    return jsonify({'error': message}), status


@proxy_bp.route('/aviation-edge/flights', methods=['GET'])
def aviation_edge_flights():
    """
    Forward a radius search to Aviation Edge.

    Query parameters:
    - lat: latitude, -90..90 (required)
    - lng: longitude, -180..180 (required)
    - distance: radius in km, (0, 500] (required)
    - limit: max results (optional, passed through)
    """
    lat = request.args.get('lat')
    lng = request.args.get('lng')
    distance = request.args.get('distance')
    limit = request.args.get('limit')

    # Validate required parameters
    if not lat or not lng or not distance:
        return _error('Missing required parameters: lat, lng, distance', 400)

    # Validate parameter bounds
    lat_value = _parse_number(lat)
    if lat_value is None or not (-90 <= lat_value <= 90):
        return _error('Invalid lat: must be between -90 and 90', 400)

    lng_value = _parse_number(lng)
    if lng_value is None or not (-180 <= lng_value <= 180):
        return _error('Invalid lng: must be between -180 and 180', 400)

    distance_value = _parse_number(distance)
    if distance_value is None or not (0 < distance_value <= MAX_DISTANCE_KM):
        return _error(f'Invalid distance: must be between 1 and {MAX_DISTANCE_KM}', 400)

    # Check for the credential
    api_key = current_app.config.get('AVIATION_EDGE_API_KEY')
    if not api_key:
        logger.error('[Proxy] Aviation Edge credential is not configured')
        return _error('Server configuration error', 500)

    params = {
        'key': api_key,
        'lat': lat,
        'lng': lng,
        'distance': distance,
    }
    if limit:
        params['limit'] = limit

    session = current_app.config.get('UPSTREAM_SESSION') or requests
    base_url = current_app.config['AVIATION_EDGE_BASE_URL']

    try:
        response = session.get(
            base_url,
            params=params,
            timeout=current_app.config.get('HTTP_TIMEOUT', 30),
        )
    except Exception as e:
        # Log server-side, redacted; never expose details to the client
        logger.error(f'[Proxy] Aviation Edge request failed: {redact_secret(str(e), api_key)}')
        return _error('Failed to fetch flight data', 502)

    if not response.ok:
        logger.error(f'[Proxy] Aviation Edge returned {response.status_code}')
        return _error('Aviation Edge API error', response.status_code)

    # Ensure we received JSON
    content_type = response.headers.get('content-type') or ''
    if 'application/json' not in content_type:
        logger.error(f'[Proxy] Aviation Edge returned non-JSON: {content_type}')
        return _error('Invalid response from Aviation Edge', 502)

    try:
        data = response.json()
    except ValueError:
        logger.error('[Proxy] Aviation Edge returned an undecodable body')
        return _error('Invalid response from Aviation Edge', 502)

    return jsonify(data), response.status_code
