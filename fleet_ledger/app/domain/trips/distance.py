"""
Trip distance helpers.
"""

import math
from typing import Optional


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points on Earth.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    R = 6371.0

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return R * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def resolve_distance_km(pickup_lat: Optional[float], pickup_lng: Optional[float],
                        drop_lat: Optional[float], drop_lng: Optional[float],
                        override: Optional[float] = None) -> Optional[float]:
    """
    Distance to store on a trip.

    A manually entered distance wins; otherwise it is computed when both
    coordinate pairs are known, rounded to 2 decimals.
    """
    if override is not None:
        return override

    if None in (pickup_lat, pickup_lng, drop_lat, drop_lng):
        return None

    return round(haversine_distance(pickup_lat, pickup_lng, drop_lat, drop_lng), 2)
