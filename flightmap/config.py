"""
Configuration management for FlightMap.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky API configuration."""
    username: Optional[str] = os.getenv('OPENSKY_USERNAME') or None
    password: Optional[str] = os.getenv('OPENSKY_PASSWORD') or None
    base_url: str = os.getenv('OPENSKY_BASE_URL', 'https://opensky-network.org/api/states/all')

    @property
    def is_authenticated(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class AviationEdgeConfig:
    """Aviation Edge credentials, held by the proxy only."""
    api_key: Optional[str] = (
        os.getenv('AVIATION_EDGE_API_KEY') or os.getenv('VITE_AVIATION_EDGE_API_KEY') or None
    )
    base_url: str = os.getenv('AVIATION_EDGE_BASE_URL', 'https://aviation-edge.com/v2/public/flights')

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class ProviderCacheConfig:
    """Per-client cache and soft rate limit windows."""
    cache_seconds: float = float(os.getenv('PROVIDER_CACHE_SECONDS', '10'))
    min_refetch_seconds: float = float(os.getenv('PROVIDER_MIN_REFETCH_SECONDS', '5'))
    # Aviation Edge rejects larger search radii
    max_radius_km: float = float(os.getenv('MAX_RADIUS_KM', '500'))


@dataclass(frozen=True)
class HttpConfig:
    """Outbound HTTP settings."""
    timeout_seconds: float = float(os.getenv('HTTP_TIMEOUT_SECONDS', '30'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    opensky: OpenSkyConfig
    aviation_edge: AviationEdgeConfig
    provider_cache: ProviderCacheConfig
    http: HttpConfig

    # Runtime provider selection written by the provider picker
    runtime_provider_file: str

    # Where this server is reachable; relative provider URLs resolve against it
    public_base_url: str

    # Canned flight details instead of route lookups
    details_demo_mode: bool

    # Flask settings
    port: int
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    port = int(os.getenv('PORT', '3001'))
    return AppConfig(
        opensky=OpenSkyConfig(),
        aviation_edge=AviationEdgeConfig(),
        provider_cache=ProviderCacheConfig(),
        http=HttpConfig(),
        runtime_provider_file=os.getenv('RUNTIME_PROVIDER_FILE', 'public/runtime-provider.json'),
        public_base_url=os.getenv('PUBLIC_BASE_URL', f'http://localhost:{port}'),
        details_demo_mode=os.getenv('DETAILS_DEMO_MODE', 'false').lower() == 'true',
        port=port,
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
