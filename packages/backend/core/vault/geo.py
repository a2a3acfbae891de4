"""
Great-circle geometry for geofenced vaults.
"""

import math
from dataclasses import dataclass

EARTH_RADIUS_METERS = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""
    lat: float
    lng: float


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Distance in meters between two points on the Earth's surface.
    
    Args:
        lat1, lng1: First point in decimal degrees
        lat2, lng2: Second point in decimal degrees
        
    Returns:
        Great-circle distance in meters
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    # rounding can push a just past 1 for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in meters between two GeoPoints."""
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Check that lat/lng are finite and inside their degree ranges."""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
