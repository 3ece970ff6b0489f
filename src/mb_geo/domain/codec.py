"""JSON codec for fences stored in the transactions.geo_fence JSONB column.

Wire shapes:
  {"kind": "circle", "latitude": 40.7, "longitude": -74.0,
   "radius_km": 1.5, "location_name": "Central Park"}
  {"kind": "polygon", "ring": [[lat, lng], ...], "location_name": "Campus"}
"""

from typing import Any

from src.mb_common.enums import FenceKind
from src.mb_common.errors import ConfigurationError
from src.mb_geo.domain.models import CircleFence, Coordinate, GeoFence, PolygonFence


def fence_to_dict(fence: GeoFence) -> dict[str, Any]:
    if isinstance(fence, CircleFence):
        return {
            "kind": FenceKind.CIRCLE.value,
            "latitude": fence.center.latitude,
            "longitude": fence.center.longitude,
            "radius_km": fence.radius_km,
            "location_name": fence.location_name,
        }
    if isinstance(fence, PolygonFence):
        return {
            "kind": FenceKind.POLYGON.value,
            "ring": [[c.latitude, c.longitude] for c in fence.ring],
            "location_name": fence.location_name,
        }
    raise ConfigurationError(f"unknown fence type: {type(fence).__name__}")


def fence_from_dict(data: dict[str, Any]) -> GeoFence:
    kind = data.get("kind")
    name = str(data.get("location_name") or "")
    try:
        if kind == FenceKind.CIRCLE.value:
            return CircleFence(
                center=Coordinate(float(data["latitude"]), float(data["longitude"])),
                radius_km=float(data["radius_km"]),
                location_name=name,
            )
        if kind == FenceKind.POLYGON.value:
            ring = tuple(Coordinate(float(lat), float(lng)) for lat, lng in data["ring"])
            return PolygonFence(ring=ring, location_name=name)
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"malformed {kind} fence: {exc}") from exc
    raise ConfigurationError(f"unknown fence kind: {kind!r}")
