"""
Runtime provider selection.

The provider picker writes a JSON document:

    {
        "selectedProviderId": "opensky",
        "selectedProvider": {"id": ..., "name": ..., "type": ..., "baseUrl": ..., "attribution": ...},
        "updatedAt": "2024-01-01T00:00:00Z"
    }

It is read once at startup. A missing or malformed file falls back to
the anonymous OpenSky provider, which needs no credential.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from flightmap.config import config
from flightmap.exceptions import ConfigurationError
from flightmap.providers.facade import OPENSKY, ProviderConfig

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = ProviderConfig(
    id='opensky',
    name='OpenSky',
    type=OPENSKY,
    base_url='https://opensky-network.org/api/states/all',
    attribution='Data: OpenSky Network',
)


def load_runtime_provider(path: Optional[Union[str, Path]] = None) -> ProviderConfig:
    """
    Read the selected provider from the runtime selection file.

    Never raises: any problem is logged and FALLBACK_PROVIDER returned.
    """
    path = Path(path or config.runtime_provider_file)

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict) or not data.get('selectedProvider'):
            raise ConfigurationError('Invalid runtime provider config')
        provider = ProviderConfig.from_dict(data['selectedProvider'])
    except FileNotFoundError:
        logger.warning(f'No runtime provider config at {path}; falling back to {FALLBACK_PROVIDER.name}')
        return FALLBACK_PROVIDER
    except (OSError, ValueError, ConfigurationError) as e:
        logger.warning(f'Falling back to default provider: {e}')
        return FALLBACK_PROVIDER

    logger.info(f'Runtime provider: {provider.name} ({provider.type}), selected {data.get("updatedAt", "?")}')
    return provider
