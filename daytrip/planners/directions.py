"""Straight-line leg estimates for drawing a day on the map."""
from __future__ import annotations

from typing import List, Sequence

from daytrip.geo import coordinate_of, distance_km, eta_minutes
from daytrip.schemas import DirectionsSegment, TravelMode, Venue

# Legs longer than this are assumed to be driven.
WALKABLE_LEG_KM = 1.2


def straight_line_directions(venues: Sequence[Venue]) -> List[DirectionsSegment]:
    stops = [(venue, coordinate_of(venue)) for venue in venues]
    stops = [(venue, position) for venue, position in stops if position is not None]

    segments: List[DirectionsSegment] = []
    for (a, pa), (b, pb) in zip(stops, stops[1:]):
        km = distance_km(pa, pb)
        mode = TravelMode.DRIVE if km > WALKABLE_LEG_KM else TravelMode.WALK
        segments.append(
            DirectionsSegment(
                frm=a.name,
                to=b.name,
                mins=eta_minutes(mode, km),
                mode=mode,
                path=[[pa.lat, pa.lng], [pb.lat, pb.lng]],
            )
        )
    return segments
