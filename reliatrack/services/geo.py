"""
Great-circle distance and service-area filtering for providers.
"""

import math
from typing import Iterable, Protocol, TypeVar

EARTH_RADIUS_MILES = 3958.8


class ServiceArea(Protocol):
    lat: float
    lng: float
    radius: float


T = TypeVar("T", bound=ServiceArea)


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in miles between two (lat, lng) points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push a just past 1 for antipodal points
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_MILES * c


def filter_within_radius(
    lat: float,
    lng: float,
    candidates: Iterable[T],
    radius: float,
) -> list[tuple[T, float]]:
    """
    Keep candidates that serve the query point.

    A candidate is kept when its distance is within the larger of its own
    service radius and the requested radius. Linear scan; results are sorted
    nearest first.
    """
    matches: list[tuple[T, float]] = []
    for candidate in candidates:
        distance = haversine_miles(lat, lng, candidate.lat, candidate.lng)
        if distance <= max(candidate.radius, radius):
            matches.append((candidate, distance))
    matches.sort(key=lambda pair: pair[1])
    return matches
