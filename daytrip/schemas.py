from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


class TravelMode(str, Enum):
    WALK = "walk"
    DRIVE = "drive"

    @classmethod
    def coerce(cls, value: Any) -> "TravelMode":
        """Map anything that is not ``drive`` onto ``walk``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.DRIVE.value:
            return cls.DRIVE
        return cls.WALK


# Unknown modes fall back to walking instead of failing validation.
Mode = Annotated[TravelMode, BeforeValidator(TravelMode.coerce)]


# ------- Positions -------
class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    """A point whose components may be missing (position unknown)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.lat is None or self.lng is None:
            return None
        return Coordinate(lat=self.lat, lng=self.lng)


class Ratings(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    combined: Optional[float] = None
    google: Optional[float] = None
    google_reviews: Optional[int] = Field(None, alias="googleReviews")


class Venue(Location):
    """A candidate or chosen place. Unknown keys ride along untouched."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    url: Optional[str] = None
    area: Optional[str] = None
    cuisine: Optional[str] = None
    price: Optional[str] = None
    desc: Optional[str] = None
    meta: Optional[str] = None
    place_id: Optional[str] = Field(None, alias="placeId")
    ratings: Optional[Ratings] = None


class AnnotatedVenue(Venue):
    estimated_minutes: int = Field(..., alias="estimatedMinutes")


# ------- Request models -------
class ProximityRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    venues: List[Venue] = Field(default_factory=list)
    center: Optional[Location] = None
    mode: Mode = TravelMode.WALK
    max_minutes: int = Field(15, alias="maxMinutes")
    limit: int = 10


class RouteRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    venues: List[Venue] = Field(default_factory=list)
    start_point: Optional[Location] = Field(None, alias="startPoint")
    mode: Mode = TravelMode.WALK


class DirectionsRequest(BaseModel):
    venues: List[Venue] = Field(default_factory=list)


class PlacesQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    city: str = "St. Louis"
    slot: str = "activity"
    limit: int = 10
    area: str = ""
    vibe: str = ""
    q: str = ""
    near: bool = False
    mode: Mode = TravelMode.WALK
    max_minutes: int = Field(15, alias="maxMins")
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    @property
    def center(self) -> Optional[Coordinate]:
        if self.lat is None or self.lng is None:
            return None
        return Coordinate(lat=self.lat, lng=self.lng)


class EnrichRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    place_name: str = Field(..., alias="placeName")
    vibe: str = "romantic"
    city: str = ""


class DayNotesRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    day: int = 1
    city: str = ""
    vibe: str = ""
    selections: Dict[str, Venue] = Field(default_factory=dict)


# ------- Response models -------
class RouteTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_time_minutes: int = Field(0, alias="totalTimeMinutes")
    total_distance_km: float = Field(0.0, alias="totalDistanceKm")


class RouteOptimization(RouteTotals):
    original_order: List[Venue] = Field(default_factory=list, alias="originalOrder")
    optimized_order: List[Venue] = Field(default_factory=list, alias="optimizedOrder")


class RouteComparison(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_order: List[Venue] = Field(default_factory=list, alias="originalOrder")
    optimized_order: List[Venue] = Field(default_factory=list, alias="optimizedOrder")
    original: RouteTotals = Field(default_factory=RouteTotals)
    optimized: RouteTotals = Field(default_factory=RouteTotals)
    minutes_saved: int = Field(0, alias="minutesSaved")
    km_saved: float = Field(0.0, alias="kmSaved")
    improved: bool = False


class DirectionsSegment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    frm: str = Field(..., alias="from")
    to: str
    mins: int
    mode: TravelMode
    path: List[List[float]] = Field(default_factory=list)



class PlaceReview(BaseModel):
    author: Optional[str] = None
    rating: Optional[float] = None
    text: Optional[str] = None


class PlaceDetails(BaseModel):
    photos: List[str] = Field(default_factory=list)
    reviews: List[PlaceReview] = Field(default_factory=list)
    hours: List[str] = Field(default_factory=list)
    phone: Optional[str] = None
    website: Optional[str] = None
