"""
Viewport filtering for flight lists.

Cheap enough to run on every render tick: positions are pulled into
NumPy arrays once and tested with a single vectorized mask. Missing
positions become NaN, which fails every comparison and so never matches.
"""

import logging
from typing import List

import numpy as np

from flightmap.models import BoundingBox, FlightState

logger = logging.getLogger(__name__)


def bbox_mask(latitudes: np.ndarray, longitudes: np.ndarray, bbox: BoundingBox) -> np.ndarray:
    """
    Boolean mask of positions inside bbox (closed intervals).

    Wrapping boxes match lon >= min_lon OR lon <= max_lon.
    """
    in_lat = (latitudes >= bbox.min_lat) & (latitudes <= bbox.max_lat)

    if bbox.wraps_dateline or bbox.min_lon > bbox.max_lon:
        in_lon = (longitudes >= bbox.min_lon) | (longitudes <= bbox.max_lon)
    else:
        in_lon = (longitudes >= bbox.min_lon) & (longitudes <= bbox.max_lon)

    return in_lat & in_lon


def filter_by_bbox(flights: List[FlightState], bbox: BoundingBox) -> List[FlightState]:
    """
    Return the flights positioned inside bbox, preserving order.

    Pure and side-effect free; the input list is not modified.
    """
    if not flights:
        return []

    latitudes = np.array([f.latitude for f in flights], dtype=np.float64)
    longitudes = np.array([f.longitude for f in flights], dtype=np.float64)

    mask = bbox_mask(latitudes, longitudes, bbox)
    visible = [flight for flight, keep in zip(flights, mask) if keep]

    logger.debug(f'Viewport filter kept {len(visible)} of {len(flights)} flights')
    return visible
