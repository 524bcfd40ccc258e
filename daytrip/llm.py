# daytrip/llm.py
import os
import logging
from typing import Dict, Optional

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError

from daytrip.schemas import Venue

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("DAYTRIP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

# Load .env file if present
load_dotenv()

DEFAULT_MODEL = os.getenv("DAYTRIP_LLM_MODEL", "gpt-4o-mini")

api_key = os.getenv("OPENAI_API_KEY")
if api_key:
    _client: Optional[OpenAI] = OpenAI(api_key=api_key)
else:  # pragma: no cover - exercised indirectly in tests without API key
    _client = None
    logger.warning("OPENAI_API_KEY not set; enrichment helpers will return empty text")

DESCRIBE_SYSTEM = "You return short, travel-friendly descriptions."

DESCRIBE_TEMPLATE = (
    'Write 2 short sentences for a {vibe} trip about "{place}" in {city}. '
    "Mention what to order or what to look for. Keep it friendly."
)

DAY_NOTES_SYSTEM = """You are a day-trip concierge.
Write 2-4 short, practical notes for the day below: pacing, reservations,
what to wear, and anything worth booking ahead.
Plain text only, one note per line, no markdown.
"""

DAY_NOTES_TEMPLATE = """Day {day} in {city} (vibe: {vibe}).
Chosen stops:
{stops}
"""


def _format_stops(selections: Dict[str, Venue]) -> str:
    lines = []
    for slot, venue in selections.items():
        where = f" ({venue.area})" if venue.area else ""
        lines.append(f"- {slot}: {venue.name}{where}")
    return "\n".join(lines) or "- (nothing chosen yet)"


def enrich_description(
    place_name: str,
    city: str = "",
    vibe: str = "romantic",
    *,
    model: str = DEFAULT_MODEL,
) -> str:
    """Two friendly sentences about a venue, or ``""`` when unavailable."""
    if _client is None:
        logger.info("Skipping enrichment for %s (missing client or API key)", place_name)
        return ""

    prompt = DESCRIBE_TEMPLATE.format(vibe=vibe or "popular", place=place_name, city=city)
    logger.info("Invoking LLM model %s to describe %s", model, place_name)
    try:
        resp = _client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": DESCRIBE_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            max_tokens=120,
            temperature=0.7,
        )
    except OpenAIError:
        logger.warning("LLM enrichment failed for %s", place_name, exc_info=True)
        return ""

    return (resp.choices[0].message.content or "").strip()


def day_notes(
    day: int,
    city: str,
    vibe: str,
    selections: Dict[str, Venue],
    *,
    model: str = DEFAULT_MODEL,
) -> Optional[str]:
    """Short planning notes for one day of the itinerary."""
    if _client is None:
        logger.info("Skipping day notes for day %s (missing client or API key)", day)
        return None

    user_prompt = DAY_NOTES_TEMPLATE.format(
        day=day,
        city=city or "unspecified",
        vibe=vibe or "any",
        stops=_format_stops(selections),
    )
    logger.info("Invoking LLM model %s for day %s notes (%d stops)", model, day, len(selections))
    try:
        resp = _client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": DAY_NOTES_SYSTEM},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.4,
        )
    except OpenAIError:
        logger.warning("LLM day notes failed for day %s", day, exc_info=True)
        return None

    text = (resp.choices[0].message.content or "").strip()
    return text or None
