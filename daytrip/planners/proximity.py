"""Near-me filtering for candidate venues."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple, Union

from daytrip.geo import coordinate_of, distance_km, eta_minutes
from daytrip.schemas import AnnotatedVenue, Location, TravelMode, Venue

logger = logging.getLogger(__name__)

DEFAULT_MAX_MINUTES = 15
MIN_MAX_MINUTES = 1
MAX_MAX_MINUTES = 60

DEFAULT_LIMIT = 10
MAX_LIMIT = 20

# Radius hint handed to the places provider, not used for the exact filter.
WALK_METERS_PER_MIN = 80
DRIVE_METERS_PER_MIN = 700
MIN_RADIUS_M = 500
MAX_RADIUS_M = 15000


def clamp_minutes(max_minutes: Optional[int]) -> int:
    if not max_minutes or max_minutes <= 0:
        return DEFAULT_MAX_MINUTES
    return max(MIN_MAX_MINUTES, min(MAX_MAX_MINUTES, int(max_minutes)))


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit <= 0:
        return DEFAULT_LIMIT
    return min(MAX_LIMIT, int(limit))


def search_radius_m(max_minutes: Optional[int], mode: TravelMode | str | None) -> int:
    """Translate a travel-time budget into a provider search radius in metres."""
    per_min = DRIVE_METERS_PER_MIN if TravelMode.coerce(mode) is TravelMode.DRIVE else WALK_METERS_PER_MIN
    radius = clamp_minutes(max_minutes) * per_min
    return max(MIN_RADIUS_M, min(MAX_RADIUS_M, radius))


def filter_nearby(
    venues: Sequence[Venue],
    center: Optional[Location],
    mode: TravelMode | str | None = TravelMode.WALK,
    max_minutes: Optional[int] = DEFAULT_MAX_MINUTES,
    limit: Optional[int] = DEFAULT_LIMIT,
) -> List[Union[AnnotatedVenue, Venue]]:
    """Return the venues reachable from ``center`` within ``max_minutes``.

    Survivors are annotated copies sorted closest first (input order breaks
    ties) and capped at ``limit``. Venues without a position are dropped.
    Without a usable center the first ``limit`` venues come back untouched.
    """
    cap = clamp_limit(limit)
    origin = coordinate_of(center)
    if origin is None:
        return list(venues[:cap])

    travel_mode = TravelMode.coerce(mode)
    budget = clamp_minutes(max_minutes)

    reachable: List[Tuple[int, Venue]] = []
    for venue in venues:
        position = coordinate_of(venue)
        if position is None:
            continue
        mins = eta_minutes(travel_mode, distance_km(origin, position))
        if mins > budget:
            continue
        reachable.append((mins, venue))

    # list.sort is stable, so equal ETAs keep their input order
    reachable.sort(key=lambda pair: pair[0])

    logger.debug(
        "Proximity filter kept %d of %d venues within %d min %s",
        len(reachable),
        len(venues),
        budget,
        travel_mode.value,
    )
    return [_annotate(venue, mins, travel_mode) for mins, venue in reachable[:cap]]


def _annotate(venue: Venue, mins: int, mode: TravelMode) -> AnnotatedVenue:
    data = venue.model_dump(by_alias=True)
    data["estimatedMinutes"] = mins
    data["meta"] = f"{mins} min {mode.value}"
    return AnnotatedVenue.model_validate(data)
