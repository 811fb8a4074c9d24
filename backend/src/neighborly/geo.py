"""
Proximity filter.

Nearby searches pre-filter candidates with a cheap lat/lng bounding box
(1 degree of latitude ~ 111 km, longitude shrunk by cos(lat)); the box
is an approximation that degrades towards the poles. The distance shown
to users is the exact haversine great-circle distance, so a record can
sit inside the box while being slightly further than the radius.
"""
import math
from typing import NamedTuple

KM_PER_DEGREE = 111
EARTH_RADIUS_KM = 6371


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return (self.min_lat <= lat <= self.max_lat
                and self.min_lng <= lng <= self.max_lng)


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """
    Axis-aligned box around a center point.

    Args:
        lat: Center latitude in degrees
        lng: Center longitude in degrees
        radius_km: Search radius in kilometers

    Returns:
        BoundingBox with inclusive edges
    """
    lat_delta = radius_km / KM_PER_DEGREE
    lng_delta = radius_km / (KM_PER_DEGREE * math.cos(math.radians(lat)))
    return BoundingBox(lat - lat_delta, lat + lat_delta, lng - lng_delta, lng + lng_delta)


def in_box(box: BoundingBox, location: dict) -> bool:
    """Test a stored {lat, lng, address} location; records without one never match."""
    if not location:
        return False
    try:
        return box.contains(float(location['lat']), float(location['lng']))
    except (KeyError, TypeError, ValueError):
        return False


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def format_distance(distance_km: float) -> str:
    """Feed label: meters below 1 km ("850m"), otherwise one decimal ("1.2km")."""
    if distance_km < 1:
        return f'{int(distance_km * 1000 + 0.5)}m'
    return f'{distance_km:.1f}km'
