"""Great-circle distance and travel-time helpers."""
from __future__ import annotations

import math
from typing import Any

from daytrip.schemas import Coordinate, Location, TravelMode

EARTH_RADIUS_KM = 6371.0

# Nominal city speeds. Every ETA in the service is derived from these.
WALK_KMH = 5.0
DRIVE_KMH = 30.0

_SPEEDS_KMH = {
    TravelMode.WALK: WALK_KMH,
    TravelMode.DRIVE: DRIVE_KMH,
}


def speed_kmh(mode: TravelMode | str | None) -> float:
    return _SPEEDS_KMH[TravelMode.coerce(mode)]


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance between two coordinates, in kilometres."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    # rounding can push h just past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def round_half_up(value: float) -> int:
    """Nearest integer, with .5 going up rather than to the even neighbour."""
    return math.floor(value + 0.5)


def eta_minutes(mode: TravelMode | str | None, km: float) -> int:
    """Whole minutes to cover ``km`` at the mode's nominal speed.

    Halves round up. Zero distance costs nothing; any movement at all costs
    at least a minute.
    """
    if km <= 0:
        return 0
    return max(1, round_half_up(km / speed_kmh(mode) * 60))


def coordinate_of(item: Any) -> Coordinate | None:
    """Return the position of a venue-like object, or ``None`` when unknown."""
    if item is None:
        return None
    if isinstance(item, Coordinate):
        return item
    if isinstance(item, Location):
        return item.coordinate
    lat = getattr(item, "lat", None)
    lng = getattr(item, "lng", None)
    if lat is None or lng is None:
        return None
    return Coordinate(lat=lat, lng=lng)
