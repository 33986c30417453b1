"""Great-circle distance and travel-time helpers.

All coordinates are in decimal degrees and all distances in kilometres.
Times are decimal minutes.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from ridematch.config import AVERAGE_SPEED_KMH, EARTH_RADIUS_KM


@dataclass(frozen=True)
class Coordinate:
    """A point on the Earth's surface.

    Attributes:
        latitude: Degrees north, in ``[-90, 90]``.
        longitude: Degrees east, in ``[-180, 180]``.
    """

    latitude: float
    longitude: float

    def __str__(self) -> str:
        return f"{self.latitude},{self.longitude}"


def is_valid_location(coordinate: Coordinate) -> bool:
    """Return ``True`` when both components lie within their legal ranges."""
    return (
        -90.0 <= coordinate.latitude <= 90.0
        and -180.0 <= coordinate.longitude <= 180.0
    )


def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates.

    Args:
        a: First point.
        b: Second point.

    Returns:
        Distance in kilometres. Symmetric, and ``0.0`` for identical points.
    """
    lat_1 = math.radians(a.latitude)
    lat_2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat_1) * math.cos(lat_2) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def travel_time(distance_km: float, average_speed_kmh: float = AVERAGE_SPEED_KMH) -> float:
    """Minutes needed to cover ``distance_km`` at a constant speed."""
    return distance_km / average_speed_kmh * 60.0


def route_distance(points: Sequence[Coordinate]) -> float:
    """Sum of the legs joining consecutive ``points``."""
    return sum(
        haversine_distance(points[i], points[i + 1])
        for i in range(len(points) - 1)
    )
