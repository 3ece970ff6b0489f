"""GeoFence evaluation: pure and deterministic, no clock or network access.

Circle: great-circle (Haversine) distance on a sphere of radius 6371 km,
boundary inclusive (distance <= radius_km).

Polygon: even-odd ray casting over the ring in plain (longitude, latitude)
degree space. Boundary rule: a point lying exactly on an edge or vertex is
INSIDE. Rings are not expected to cross the antimeridian.
"""

import math

from src.mb_common.errors import ConfigurationError
from src.mb_geo.domain.models import CircleFence, Coordinate, GeoFence, PolygonFence

EARTH_RADIUS_KM = 6371.0

# Float slack for the inclusive circle boundary (one micrometre).
_BOUNDARY_EPSILON_KM = 1e-9
_COLLINEAR_EPSILON = 1e-12


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def validate_coordinate(point: Coordinate) -> None:
    if not (-90.0 <= point.latitude <= 90.0):
        raise ConfigurationError(f"latitude out of range: {point.latitude}")
    if not (-180.0 <= point.longitude <= 180.0):
        raise ConfigurationError(f"longitude out of range: {point.longitude}")


def validate_fence(fence: GeoFence) -> None:
    """Raise ConfigurationError unless the fence has exactly one usable geometry."""
    if isinstance(fence, CircleFence):
        validate_coordinate(fence.center)
        if not fence.radius_km > 0:
            raise ConfigurationError(f"radius_km must be > 0, got {fence.radius_km}")
        return
    if isinstance(fence, PolygonFence):
        if len(fence.ring) < 3:
            raise ConfigurationError(
                f"polygon needs at least 3 points, got {len(fence.ring)}"
            )
        for vertex in fence.ring:
            validate_coordinate(vertex)
        return
    raise ConfigurationError(f"unknown fence type: {type(fence).__name__}")


def is_within_fence(point: Coordinate, fence: GeoFence) -> bool:
    validate_fence(fence)
    if isinstance(fence, CircleFence):
        return haversine_km(point, fence.center) <= fence.radius_km + _BOUNDARY_EPSILON_KM
    return _point_in_polygon(point, fence.ring)


def _on_segment(p: Coordinate, a: Coordinate, b: Coordinate) -> bool:
    cross = (b.longitude - a.longitude) * (p.latitude - a.latitude) - (
        b.latitude - a.latitude
    ) * (p.longitude - a.longitude)
    if abs(cross) > _COLLINEAR_EPSILON:
        return False
    return (
        min(a.longitude, b.longitude) <= p.longitude <= max(a.longitude, b.longitude)
        and min(a.latitude, b.latitude) <= p.latitude <= max(a.latitude, b.latitude)
    )


def _point_in_polygon(point: Coordinate, ring: tuple[Coordinate, ...]) -> bool:
    x, y = point.longitude, point.latitude
    inside = False
    n = len(ring)
    for i in range(n):
        a = ring[i]
        b = ring[(i + 1) % n]
        if _on_segment(point, a, b):
            return True
        # Half-open rule on latitude so a vertex is never counted twice
        if (a.latitude > y) != (b.latitude > y):
            x_cross = a.longitude + (y - a.latitude) * (b.longitude - a.longitude) / (
                b.latitude - a.latitude
            )
            if x < x_cross:
                inside = not inside
    return inside
