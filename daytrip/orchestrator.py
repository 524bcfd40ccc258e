# daytrip/orchestrator.py
from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

from daytrip.llm import day_notes, enrich_description
from daytrip.planners.directions import straight_line_directions
from daytrip.planners.proximity import clamp_limit, filter_nearby, search_radius_m
from daytrip.planners.route_optimizer import compare_routes
from daytrip.schemas import (
    DayNotesRequest,
    PlacesQuery,
    RouteComparison,
    RouteRequest,
    Venue,
)
from daytrip.tools.places import PlacesClient

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("DAYTRIP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False


async def suggest_venues(
    query: PlacesQuery,
    *,
    client: Optional[PlacesClient] = None,
    enrich: bool = False,
) -> Dict[str, Any]:
    """Fetch candidates for one slot and keep the ones worth showing.

    Provider errors propagate; the HTTP layer decides how to report them.
    """
    client = client or PlacesClient()
    raw = await client.search(query)

    center = query.center
    radius: Optional[int] = None
    if query.near and center is not None:
        radius = search_radius_m(query.max_minutes, query.mode)
        items: List[Venue] = list(
            filter_nearby(raw, center, query.mode, query.max_minutes, query.limit)
        )
    else:
        items = raw[: clamp_limit(query.limit)]

    logger.info(
        "Suggesting %d of %d %s venues in %s (near=%s)",
        len(items),
        len(raw),
        query.slot,
        query.city,
        query.near and center is not None,
    )

    if enrich:
        items = await _enrich_descriptions(items, query)

    return {
        "items": [item.model_dump(mode="json", by_alias=True) for item in items],
        "radiusMeters": radius,
    }


async def _enrich_descriptions(items: List[Venue], query: PlacesQuery) -> List[Venue]:
    # Provider "desc" is only a list of place types; swap in prose when we get some.
    texts = await asyncio.gather(
        *(
            asyncio.to_thread(enrich_description, item.name, query.city, query.vibe or "popular")
            for item in items
        )
    )
    return [
        item.model_copy(update={"desc": text}) if text else item
        for item, text in zip(items, texts)
    ]


def rearrange_day(request: RouteRequest) -> RouteComparison:
    comparison = compare_routes(request.venues, request.start_point, request.mode)
    logger.info(
        "Rearranged %d stops: %d -> %d min (saved %d)",
        len(request.venues),
        comparison.original.total_time_minutes,
        comparison.optimized.total_time_minutes,
        comparison.minutes_saved,
    )
    return comparison


def day_directions(venues: List[Venue]) -> Dict[str, Any]:
    segments = straight_line_directions(venues)
    return {"directions": [seg.model_dump(mode="json", by_alias=True) for seg in segments]}


async def notes_for_day(request: DayNotesRequest) -> Dict[str, Any]:
    notes = await asyncio.to_thread(
        day_notes, request.day, request.city, request.vibe, request.selections
    )
    return {"notes": notes}


async def place_details(place_id: str, *, client: Optional[PlacesClient] = None) -> Dict[str, Any]:
    client = client or PlacesClient()
    details = await client.details(place_id)
    return details.model_dump(mode="json")
