from typing import Any, Dict, Iterable, List, Optional
import os

import httpx
from pydantic import ValidationError

from daytrip.planners.proximity import search_radius_m
from daytrip.schemas import PlaceDetails, PlaceReview, PlacesQuery, Ratings, Venue

import logging

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("DAYTRIP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

PLACE_TYPE_MAP: Dict[str, str] = {
    "breakfast": "breakfast",
    "lunch": "restaurant",
    "dinner": "restaurant",
    "coffee": "cafe",
    "activity": "tourist_attraction",
    "hotel": "lodging",
}


class PlacesConfigError(RuntimeError):
    """Raised when the provider key is missing."""


class PlaceNotFoundError(LookupError):
    """Raised when a details lookup comes back with any status but OK."""


def build_text_query(city: str, slot: str, area: str = "", vibe: str = "", q: str = "") -> str:
    if q and q.strip():
        return q.strip()
    kind = PLACE_TYPE_MAP.get(slot, "restaurant")
    prefix = f"{vibe} " if vibe else ""
    where = f"{area}, " if area else ""
    return f"{prefix}{kind} near {where}{city}"


def normalise_result(raw: Dict[str, Any]) -> Venue:
    """Reshape a Google Places text-search hit into a ``Venue``."""
    location = (raw.get("geometry") or {}).get("location") or {}
    price_level = raw.get("price_level")
    price = "$" * price_level if isinstance(price_level, int) and price_level > 0 else None
    types = raw.get("types") or []
    ratings = None
    if raw.get("rating") is not None:
        ratings = Ratings(google=raw.get("rating"), google_reviews=raw.get("user_ratings_total"))
    return Venue(
        name=raw.get("name") or "",
        area=raw.get("formatted_address") or raw.get("vicinity"),
        lat=location.get("lat"),
        lng=location.get("lng"),
        desc=", ".join(t for t in types if isinstance(t, str)) or None,
        price=price,
        ratings=ratings,
        place_id=raw.get("place_id"),
        url="",
    )


class PlacesClient:
    """
    Thin Google Places text-search adapter. Returns raw candidates only;
    distance filtering is done by the caller.
    """
    TEXT_SEARCH_ENDPOINT = "https://maps.googleapis.com/maps/api/place/textsearch/json"
    DETAILS_ENDPOINT = "https://maps.googleapis.com/maps/api/place/details/json"
    PHOTO_ENDPOINT = "https://maps.googleapis.com/maps/api/place/photo"
    DETAILS_FIELDS = "photos,reviews,opening_hours,formatted_phone_number,website"
    MAX_PHOTOS = 4
    MAX_REVIEWS = 3

    def __init__(self, *, api_key: Optional[str] = None, timeout: float = 10.0):
        self.api_key = api_key or os.getenv("GOOGLE_PLACES_API_KEY")
        self.timeout = timeout

    async def search(self, query: PlacesQuery) -> List[Venue]:
        if not self.api_key:
            raise PlacesConfigError("GOOGLE_PLACES_API_KEY missing on server")

        text_query = build_text_query(query.city, query.slot, query.area, query.vibe, query.q)
        params: Dict[str, Any] = {"query": text_query, "key": self.api_key}
        center = query.center
        if query.near and center is not None:
            params["location"] = f"{center.lat},{center.lng}"
            params["radius"] = search_radius_m(query.max_minutes, query.mode)

        logger.info("Searching places for '%s' (radius=%s)", text_query, params.get("radius"))
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.TEXT_SEARCH_ENDPOINT, params=params)
            response.raise_for_status()
            data = response.json()

        status = data.get("status")
        if status not in (None, "OK", "ZERO_RESULTS"):
            logger.warning("Places search returned status %s for '%s'", status, text_query)
        return self._normalise_all(data.get("results") or [])

    async def details(self, place_id: str) -> PlaceDetails:
        """Photos, top reviews, opening hours and contact info for one place."""
        if not self.api_key:
            raise PlacesConfigError("GOOGLE_PLACES_API_KEY missing on server")

        params = {"place_id": place_id, "fields": self.DETAILS_FIELDS, "key": self.api_key}
        logger.info("Fetching place details for %s", place_id)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.DETAILS_ENDPOINT, params=params)
            response.raise_for_status()
            data = response.json()

        status = data.get("status")
        if status != "OK":
            logger.warning("Place details returned status %s for %s", status, place_id)
            raise PlaceNotFoundError(place_id)

        result = data.get("result") or {}
        photos = [
            f"{self.PHOTO_ENDPOINT}?maxwidth=400&photoreference={photo['photo_reference']}&key={self.api_key}"
            for photo in (result.get("photos") or [])[: self.MAX_PHOTOS]
            if photo.get("photo_reference")
        ]
        reviews = [
            PlaceReview(author=review.get("author_name"), rating=review.get("rating"), text=review.get("text"))
            for review in (result.get("reviews") or [])[: self.MAX_REVIEWS]
        ]
        return PlaceDetails(
            photos=photos,
            reviews=reviews,
            hours=(result.get("opening_hours") or {}).get("weekday_text") or [],
            phone=result.get("formatted_phone_number"),
            website=result.get("website"),
        )

    @staticmethod
    def _normalise_all(results: Iterable[Dict[str, Any]]) -> List[Venue]:
        venues: List[Venue] = []
        for raw in results:
            if not isinstance(raw, dict) or not raw.get("name"):
                continue
            try:
                venues.append(normalise_result(raw))
            except ValidationError:
                logger.warning("Skipping malformed place result '%s'", raw.get("name"), exc_info=True)
        return venues
