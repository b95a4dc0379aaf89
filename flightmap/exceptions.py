"""
Error taxonomy for FlightMap.

- InvalidBoundsError: bad viewport input, raised while building a bounding box
- UpstreamRequestError: non-success or malformed response from a flight data provider
- ConfigurationError: unsupported or missing provider setup, fatal at startup
"""

from typing import Optional


class FlightMapError(Exception):
    """Base class for all FlightMap errors."""


class InvalidBoundsError(FlightMapError, ValueError):
    """Raised when raw map bounds cannot form a bounding box."""


class UpstreamRequestError(FlightMapError):
    """Raised when a flight data provider request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(FlightMapError):
    """Raised when provider configuration is unsupported or incomplete."""
