"""Shared fixtures for FlightMap tests."""

from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
from requests.structures import CaseInsensitiveDict

from flightmap.app import create_app
from flightmap.providers import ProviderConfig, create_flight_provider
from flightmap.services import MockFlightDetailsProvider

TEST_API_KEY = 'test-api-key-12345'


class FakeClock:
    """Manually advanced clock for cache window tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(
    json_data: Any = None,
    status: int = 200,
    content_type: str = 'application/json',
    json_error: Optional[Exception] = None,
) -> MagicMock:
    """Build a requests.Response stand-in."""
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 400
    response.headers = CaseInsensitiveDict({'Content-Type': content_type})
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


def opensky_row(icao24='abc123', callsign='TEST123 ', lon=12.34, lat=56.78):
    """A full 17-field OpenSky state vector."""
    row = [
        icao24,
        callsign,
        'United States',
        1700000000,
        1700000001,
        lon,
        lat,
        1000.0,
        False,
        200.0,
        90.0,
        0.0,
        None,
        1200.0,
        '7700',
        False,
        0,
    ]
    return row


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    """Mock requests.Session; tests set session.get.return_value / side_effect."""
    return MagicMock()


@pytest.fixture
def opensky_config():
    return ProviderConfig(
        id='opensky',
        name='OpenSky',
        type='opensky',
        base_url='https://example.test/opensky',
        attribution='Data: OpenSky Network',
    )


@pytest.fixture
def aviation_edge_config():
    return ProviderConfig(
        id='aviation-edge',
        name='Aviation Edge',
        type='aviation-edge',
        base_url='https://example.test/aviation-edge',
        attribution='Data: Aviation Edge',
    )


@pytest.fixture
def provider(opensky_config, session, clock):
    return create_flight_provider(
        opensky_config,
        session=session,
        clock=clock,
        cache_seconds=10,
        min_refetch_seconds=0,
    )


@pytest.fixture
def upstream_session():
    """Outbound session used by the proxy."""
    return MagicMock()


@pytest.fixture
def app(provider, upstream_session):
    app = create_app(
        provider=provider,
        details_provider=MockFlightDetailsProvider(delay_seconds=0),
        upstream_session=upstream_session,
    )
    app.config.update(
        TESTING=True,
        AVIATION_EDGE_API_KEY=TEST_API_KEY,
        AVIATION_EDGE_BASE_URL='https://aviation-edge.test/v2/public/flights',
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()
