"""
Great-circle helpers on a spherical Earth.

Inputs and outputs are in degrees; everything in between is radians.
"""

import math

from .models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine central angle between two points given in radians."""
    a = (math.sin((lat2 - lat1) / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2)
    a = min(1.0, max(0.0, a))
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_distance(start: GeoPoint, end: GeoPoint) -> float:
    """Great-circle distance in kilometers."""
    angle = _central_angle(
        math.radians(start.latitude), math.radians(start.longitude),
        math.radians(end.latitude), math.radians(end.longitude),
    )
    return EARTH_RADIUS_KM * angle


def interpolate_great_circle(start: GeoPoint, end: GeoPoint, fraction: float) -> GeoPoint:
    """
    Point at `fraction` of the way along the great circle from start to end.

    Identical endpoints have no defined great circle; the shared point is
    returned for every fraction.
    """
    fraction = min(1.0, max(0.0, fraction))
    if fraction == 0.0:
        return start
    if fraction == 1.0:
        return end

    lat1, lon1 = math.radians(start.latitude), math.radians(start.longitude)
    lat2, lon2 = math.radians(end.latitude), math.radians(end.longitude)

    delta_sigma = _central_angle(lat1, lon1, lat2, lon2)
    if delta_sigma == 0:
        return start

    a = math.sin((1 - fraction) * delta_sigma) / math.sin(delta_sigma)
    b = math.sin(fraction * delta_sigma) / math.sin(delta_sigma)

    x = a * math.cos(lat1) * math.cos(lon1) + b * math.cos(lat2) * math.cos(lon2)
    y = a * math.cos(lat1) * math.sin(lon1) + b * math.cos(lat2) * math.sin(lon2)
    z = a * math.sin(lat1) + b * math.sin(lat2)

    lat = math.atan2(z, math.sqrt(x ** 2 + y ** 2))
    lon = math.atan2(y, x)

    return GeoPoint(longitude=math.degrees(lon), latitude=math.degrees(lat))


def calculate_bearing(start: GeoPoint, end: GeoPoint) -> float:
    """Initial bearing from start toward end, in degrees [0, 360)."""
    lat1_rad = math.radians(start.latitude)
    lat2_rad = math.radians(end.latitude)
    delta_lon = math.radians(end.longitude - start.longitude)

    y = math.sin(delta_lon) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon)

    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360
