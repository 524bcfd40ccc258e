"""Nearest-neighbour day reordering and route totals."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from daytrip.geo import coordinate_of, distance_km, eta_minutes
from daytrip.schemas import (
    Coordinate,
    Location,
    RouteComparison,
    RouteOptimization,
    RouteTotals,
    TravelMode,
    Venue,
)

logger = logging.getLogger(__name__)

# Reordering fewer stops than this cannot shorten anything.
MIN_STOPS_TO_OPTIMIZE = 3


def sum_route_legs(
    points: Sequence[Coordinate],
    mode: TravelMode | str | None,
    start: Optional[Coordinate] = None,
) -> RouteTotals:
    """Total time and distance for visiting ``points`` in order.

    When ``start`` is given the leg from it to the first point counts too.
    Each leg is costed with :func:`eta_minutes` so totals from different
    orderings are directly comparable.
    """
    travel_mode = TravelMode.coerce(mode)
    total_km = 0.0
    total_min = 0
    previous = start
    for point in points:
        if previous is not None:
            km = distance_km(previous, point)
            total_km += km
            total_min += eta_minutes(travel_mode, km)
        previous = point
    return RouteTotals(total_time_minutes=total_min, total_distance_km=round(total_km, 2))


def _positioned(venues: Sequence[Venue]) -> List[Tuple[Venue, Coordinate]]:
    located: List[Tuple[Venue, Coordinate]] = []
    for venue in venues:
        position = coordinate_of(venue)
        if position is not None:
            located.append((venue, position))
    return located


def evaluate_route(
    venues: Sequence[Venue],
    start_point: Optional[Location | Coordinate] = None,
    mode: TravelMode | str | None = TravelMode.WALK,
) -> RouteTotals:
    """Totals for the given order, skipping venues with no position."""
    points = [position for _, position in _positioned(venues)]
    return sum_route_legs(points, mode, start=coordinate_of(start_point))


def optimize_route(
    venues: Sequence[Venue],
    start_point: Optional[Location | Coordinate] = None,
    mode: TravelMode | str | None = TravelMode.WALK,
) -> RouteOptimization:
    """Greedy nearest-neighbour ordering of a day's stops.

    Stops without coordinates are left out of the optimized order. With two
    or fewer usable stops the input order comes back as-is with zero totals.
    """
    original = list(venues)
    located = _positioned(original)
    if len(located) < MIN_STOPS_TO_OPTIMIZE:
        return RouteOptimization(original_order=original, optimized_order=list(original))

    start = coordinate_of(start_point)
    visited = [False] * len(located)
    order: List[int] = []

    if start is None:
        # first usable stop is where the day begins; no travel to reach it
        visited[0] = True
        order.append(0)
        current = located[0][1]
    else:
        current = start

    while len(order) < len(located):
        nearest_idx = -1
        nearest_km = 0.0
        for idx, (_, position) in enumerate(located):
            if visited[idx]:
                continue
            km = distance_km(current, position)
            # strict comparison keeps the first-found stop on ties
            if nearest_idx < 0 or km < nearest_km:
                nearest_idx = idx
                nearest_km = km
        visited[nearest_idx] = True
        order.append(nearest_idx)
        current = located[nearest_idx][1]

    optimized = [located[idx][0] for idx in order]
    totals = sum_route_legs([located[idx][1] for idx in order], mode, start=start)

    logger.debug(
        "Optimized %d stops (%d skipped without coordinates): %d min, %.2f km",
        len(located),
        len(original) - len(located),
        totals.total_time_minutes,
        totals.total_distance_km,
    )
    return RouteOptimization(
        original_order=original,
        optimized_order=optimized,
        total_time_minutes=totals.total_time_minutes,
        total_distance_km=totals.total_distance_km,
    )


def compare_routes(
    venues: Sequence[Venue],
    start_point: Optional[Location | Coordinate] = None,
    mode: TravelMode | str | None = TravelMode.WALK,
) -> RouteComparison:
    """Before/after totals for the "rearrange my day" suggestion."""
    result = optimize_route(venues, start_point, mode)
    before = evaluate_route(result.original_order, start_point, mode)
    after = evaluate_route(result.optimized_order, start_point, mode)

    minutes_saved = max(0, before.total_time_minutes - after.total_time_minutes)
    km_saved = max(0.0, round(before.total_distance_km - after.total_distance_km, 2))
    return RouteComparison(
        original_order=result.original_order,
        optimized_order=result.optimized_order,
        original=before,
        optimized=after,
        minutes_saved=minutes_saved,
        km_saved=km_saved,
        improved=minutes_saved > 0 or km_saved > 0,
    )
