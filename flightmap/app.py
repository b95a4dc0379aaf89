"""
FlightMap Flask Application.

Main entry point for the web application. Initializes:
- Flight provider from the runtime selection file
- Flight details provider
- API routes (flights, Aviation Edge proxy)

Usage:
    python -m flightmap.app

Or with gunicorn:
    gunicorn 'flightmap.app:create_app()'
"""

import logging
from typing import Optional

import requests
from flask import Flask
from flask_cors import CORS

from flightmap.api import flights_bp, proxy_bp
from flightmap.config import config
from flightmap.feed import FlightFeed
from flightmap.providers import (
    FlightProvider,
    ProviderConfig,
    create_flight_provider,
    load_runtime_provider,
)
from flightmap.services import (
    FlightDetailsProvider,
    MockFlightDetailsProvider,
    RouteDetailsProvider,
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    provider_config: Optional[ProviderConfig] = None,
    provider: Optional[FlightProvider] = None,
    details_provider: Optional[FlightDetailsProvider] = None,
    upstream_session: Optional[requests.Session] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        provider_config: Provider selection; read from the runtime file if None.
        provider: Ready-made provider, overrides provider_config. For testing.
        details_provider: Flight details source; route lookups if None.
        upstream_session: HTTP session for the proxy's outbound calls.

    Returns:
        Configured Flask application instance.

    Raises:
        ConfigurationError if the selected provider type is unsupported.
    """
    app = Flask(__name__)

    # Configuration
    app.config['AVIATION_EDGE_API_KEY'] = config.aviation_edge.api_key
    app.config['AVIATION_EDGE_BASE_URL'] = config.aviation_edge.base_url
    app.config['HTTP_TIMEOUT'] = config.http.timeout_seconds
    app.config['UPSTREAM_SESSION'] = upstream_session or requests.Session()

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Flight provider, chosen once per process
    if provider is None:
        provider = create_flight_provider(provider_config or load_runtime_provider())
    app.config['FLIGHT_PROVIDER'] = provider

    # Latest applied flight list, shared by the flights and details endpoints
    feed = FlightFeed(provider)
    app.config['FLIGHT_FEED'] = feed
    app.config['FLIGHT_LOOKUP'] = feed.find

    if details_provider is None:
        if config.details_demo_mode:
            logger.info('Flight details running in DEMO MODE with mock data')
            details_provider = MockFlightDetailsProvider()
        else:
            details_provider = RouteDetailsProvider(feed.find)
    app.config['DETAILS_PROVIDER'] = details_provider

    if not config.aviation_edge.is_configured:
        logger.warning('Aviation Edge credential not configured - proxy will answer 500')

    # Register API blueprints
    app.register_blueprint(flights_bp)
    app.register_blueprint(proxy_bp)

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    logger.info(f'FlightMap ready with provider {provider.name}')
    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    logger.info(f'Starting FlightMap on http://localhost:{config.port}')

    app.run(
        host='0.0.0.0',
        port=config.port,
        debug=config.debug,
        use_reloader=False,
    )


if __name__ == '__main__':
    run_development_server()
