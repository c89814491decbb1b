"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
DO NOT duplicate these functions elsewhere.
"""
import logging
import math
from typing import Callable, Optional, Sequence

import polyline

logger = logging.getLogger(__name__)

# Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0

# (lat, lng) in degrees
Coordinates = tuple[float, float]
PolylineDecoder = Callable[[str], Sequence[Sequence[float]]]


def haversine_m(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance_between(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in meters between two (lat, lng) pairs."""
    return haversine_m(a[0], a[1], b[0], b[1])


def decode_start_point(
    encoded: Optional[str],
    decode: PolylineDecoder = polyline.decode,
) -> Optional[Coordinates]:
    """
    First point of an encoded polyline.

    Args:
        encoded: Google encoded polyline (may be None or empty)
        decode: Decoder returning ordered (lat, lng) pairs

    Returns:
        (lat, lng) of the first point, or None when the polyline is
        missing, empty or cannot be decoded
    """
    if not encoded:
        return None

    try:
        points = decode(encoded)
    except Exception as e:
        logger.warning(f"Could not decode polyline ({len(encoded)} chars): {e}")
        return None

    if not points:
        return None

    lat, lng = points[0][0], points[0][1]
    return float(lat), float(lng)
