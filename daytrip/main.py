from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from daytrip.llm import enrich_description
from daytrip.orchestrator import (
    day_directions,
    notes_for_day,
    place_details,
    rearrange_day,
    suggest_venues,
)
from daytrip.planners.proximity import filter_nearby, search_radius_m
from daytrip.planners.route_optimizer import evaluate_route, optimize_route
from daytrip.schemas import (
    DayNotesRequest,
    DirectionsRequest,
    EnrichRequest,
    PlacesQuery,
    ProximityRequest,
    RouteRequest,
)
from daytrip.tools.places import PlaceNotFoundError, PlacesConfigError

load_dotenv()

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("DAYTRIP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

app = FastAPI(title="Day Trip Planner API")

# The Vite dev server and static builds call the API cross-origin. Operators can
# narrow this via DAYTRIP_ALLOWED_ORIGINS.
raw_origins = os.getenv("DAYTRIP_ALLOWED_ORIGINS") or "*"
allowed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
if not allowed_origins:
    allowed_origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model: Type[ModelT], payload: Dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()) from exc


@app.get("/api/health")
async def api_health() -> Dict[str, Any]:
    return {"ok": True, "ts": int(time.time() * 1000)}


@app.post("/api/proximity")
async def api_proximity(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Filter caller-supplied venues to those reachable from the center."""
    req = _validate(ProximityRequest, payload)
    items = filter_nearby(req.venues, req.center, req.mode, req.max_minutes, req.limit)
    return {
        "items": [item.model_dump(mode="json", by_alias=True) for item in items],
        "radiusMeters": search_radius_m(req.max_minutes, req.mode),
    }


@app.post("/api/route/optimize")
async def api_route_optimize(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    req = _validate(RouteRequest, payload)
    result = optimize_route(req.venues, req.start_point, req.mode)
    return result.model_dump(mode="json", by_alias=True)


@app.post("/api/route/evaluate")
async def api_route_evaluate(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    req = _validate(RouteRequest, payload)
    totals = evaluate_route(req.venues, req.start_point, req.mode)
    return totals.model_dump(mode="json", by_alias=True)


@app.post("/api/route/compare")
async def api_route_compare(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Primary "rearrange my day" endpoint consumed by the day planner."""
    req = _validate(RouteRequest, payload)
    return rearrange_day(req).model_dump(mode="json", by_alias=True)


@app.post("/api/directions")
async def api_directions(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    req = _validate(DirectionsRequest, payload)
    return day_directions(req.venues)


@app.get("/api/places")
async def api_places(request: Request):
    # Blank query values mean "not provided".
    params = {k: v for k, v in request.query_params.items() if v != ""}
    enrich = params.pop("enrich", "false").lower() == "true"
    query = _validate(PlacesQuery, params)

    try:
        return await suggest_venues(query, enrich=enrich)
    except PlacesConfigError as exc:
        logger.error("Places search unavailable: %s", exc)
        return JSONResponse(status_code=500, content={"items": [], "error": str(exc)})
    except httpx.HTTPError as exc:
        logger.warning("Places provider request failed", exc_info=True)
        return JSONResponse(status_code=502, content={"items": [], "error": f"places provider error: {exc}"})


@app.get("/api/place-details")
async def api_place_details(place_id: Optional[str] = Query(None, alias="placeId")):
    if not place_id:
        return JSONResponse(status_code=400, content={"error": "placeId is required"})

    try:
        return await place_details(place_id)
    except PlacesConfigError as exc:
        logger.error("Place details unavailable: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
    except PlaceNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Place not found"})
    except httpx.HTTPError as exc:
        logger.warning("Place details request failed", exc_info=True)
        return JSONResponse(status_code=502, content={"error": f"places provider error: {exc}"})


@app.post("/api/enrich")
async def api_enrich(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    req = _validate(EnrichRequest, payload)
    desc = await asyncio.to_thread(enrich_description, req.place_name, req.city, req.vibe)
    return {"desc": desc}


@app.post("/api/day-notes")
async def api_day_notes(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    req = _validate(DayNotesRequest, payload)
    return await notes_for_day(req)
