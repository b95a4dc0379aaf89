"""
Flight provider facade.

Consumers never talk to a client class directly: they get a
FlightProvider carrying identity (id, name, attribution) and a single
get_states(bbox) operation, whichever upstream is configured.

Usage:
    from flightmap.providers import ProviderConfig, create_flight_provider

    provider = create_flight_provider(ProviderConfig.from_dict(data))
    flights = provider.get_states(bbox)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests

from flightmap.config import config as app_config
from flightmap.exceptions import ConfigurationError
from flightmap.models import BoundingBox, FlightState
from flightmap.providers.aviation_edge_client import AviationEdgeClient
from flightmap.providers.base import ProviderClient
from flightmap.providers.opensky_client import OpenSkyClient

logger = logging.getLogger(__name__)

OPENSKY = 'opensky'
AVIATION_EDGE = 'aviation-edge'
PROVIDER_TYPES = (OPENSKY, AVIATION_EDGE)


@dataclass(frozen=True)
class ProviderParams:
    limit: Optional[int] = None


@dataclass(frozen=True)
class ProviderConfig:
    """
    Provider selection, loaded once at startup.

    api_key_env names an environment variable holding a server-side key.
    Browser-facing setups leave it unset and point base_url at the proxy.
    """
    id: str
    name: str
    type: str
    base_url: str
    attribution: str
    api_key_env: Optional[str] = None
    params: ProviderParams = field(default_factory=ProviderParams)

    @classmethod
    def from_dict(cls, data: dict) -> 'ProviderConfig':
        """
        Build from the runtime selection JSON (camelCase keys).

        Raises ConfigurationError when a required field is missing.
        """
        if not isinstance(data, dict):
            raise ConfigurationError('Provider config must be an object')

        missing = [
            key for key in ('id', 'name', 'type', 'baseUrl', 'attribution')
            if not isinstance(data.get(key), str) or not data.get(key)
        ]
        if missing:
            raise ConfigurationError(f'Provider config missing fields: {", ".join(missing)}')

        raw_params = data.get('params') or {}
        limit = raw_params.get('limit') if isinstance(raw_params, dict) else None
        try:
            limit = int(limit) if limit is not None else None
        except (TypeError, ValueError):
            raise ConfigurationError(f'Invalid provider limit: {limit!r}')

        return cls(
            id=data['id'],
            name=data['name'],
            type=data['type'],
            base_url=data['baseUrl'],
            attribution=data['attribution'],
            api_key_env=data.get('apiKeyEnv') or None,
            params=ProviderParams(limit=limit),
        )

    def to_dict(self) -> dict:
        result = {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'baseUrl': self.base_url,
            'attribution': self.attribution,
        }
        if self.api_key_env:
            result['apiKeyEnv'] = self.api_key_env
        if self.params.limit is not None:
            result['params'] = {'limit': self.params.limit}
        return result


class FlightProvider:
    """Identity plus the unified get_states contract."""

    def __init__(self, config: ProviderConfig, client: ProviderClient):
        self.id = config.id
        self.name = config.name
        self.attribution = config.attribution
        self.type = config.type
        self.client = client

    def __repr__(self) -> str:
        return f'<FlightProvider {self.id} ({self.type})>'

    def get_states(self, bbox: BoundingBox) -> List[FlightState]:
        return self.client.get_states(bbox)

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'attribution': self.attribution}


def create_flight_provider(
    config: ProviderConfig,
    session: Optional[requests.Session] = None,
    clock: Optional[Callable[[], float]] = None,
    **client_options,
) -> FlightProvider:
    """
    Construct the client for config.type and wrap it in a FlightProvider.

    Raises ConfigurationError for unsupported types; this is a startup
    fault, never deferred to the first query.
    """
    options = dict(client_options, session=session, clock=clock)

    if config.type == OPENSKY:
        client = OpenSkyClient(
            base_url=config.base_url,
            username=app_config.opensky.username,
            password=app_config.opensky.password,
            **options,
        )

    elif config.type == AVIATION_EDGE:
        api_key = None
        if config.api_key_env:
            api_key = os.getenv(config.api_key_env) or None
            if not api_key:
                logger.warning(f'{config.api_key_env} is not set; requests go out without a key')
        client = AviationEdgeClient(
            base_url=config.base_url,
            api_key=api_key,
            limit=config.params.limit,
            **options,
        )

    else:
        raise ConfigurationError(f'Unsupported provider type: {config.type}')

    logger.info(f'Flight provider ready: {config.name} ({config.type})')
    return FlightProvider(config, client)
