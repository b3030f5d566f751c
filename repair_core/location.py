# repair_core/location.py
"""
Venue / area / work-type tagging from the fault description.

Rules (keyword tables live in constants.py):
1. Venue: "北館" -> 北館, else "南館" -> 南館, else 未知場域.
2. Area: searched only in the table of the detected venue, first keyword
   wins; compound directions are listed before simple ones.
3. Nothing found -> UNIDENTIFIABLE_AREA_TAG.
"""
from __future__ import annotations
from typing import Optional, Sequence, Tuple

from .constants import (
    AREA_KEYWORDS_BY_VENUE,
    UNIDENTIFIABLE_AREA_TAG,
    VENUE_KEYWORDS,
    VENUE_UNKNOWN,
    WORK_TYPE_MAP,
    WORK_TYPE_OTHER,
)


def _first_keyword_hit(text_lower: str, table: Sequence[Tuple[str, str]]) -> Optional[str]:
    for keyword, value in table:
        if keyword.lower() in text_lower:
            return value
    return None


def classify_venue(description: Optional[str]) -> str:
    text = (description or "").lower()
    return _first_keyword_hit(text, VENUE_KEYWORDS) or VENUE_UNKNOWN


def classify_area(description: Optional[str], venue: str) -> str:
    table = AREA_KEYWORDS_BY_VENUE.get(venue)
    if not table:
        return UNIDENTIFIABLE_AREA_TAG
    text = (description or "").lower()
    return _first_keyword_hit(text, table) or UNIDENTIFIABLE_AREA_TAG


def classify_location(description: Optional[str]) -> Tuple[str, str]:
    """(venue, area) for one fault description."""
    venue = classify_venue(description)
    return venue, classify_area(description, venue)


def classify_work_type(work_attribute: Optional[str]) -> str:
    return WORK_TYPE_MAP.get(work_attribute or "", WORK_TYPE_OTHER)
