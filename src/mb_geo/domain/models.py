"""Domain models for mb_geo: immutable value objects, no I/O.

A GeoFence is a tagged variant: exactly one geometry per fence type.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Coordinate:
    latitude: float   # degrees, [-90, 90]
    longitude: float  # degrees, [-180, 180]


@dataclass(frozen=True)
class CircleFence:
    center: Coordinate
    radius_km: float
    location_name: str = ""  # display only


@dataclass(frozen=True)
class PolygonFence:
    ring: tuple[Coordinate, ...]  # ordered, implicitly closed (last -> first)
    location_name: str = ""


GeoFence = CircleFence | PolygonFence


@dataclass(frozen=True)
class TimeRestriction:
    expires_at: datetime
