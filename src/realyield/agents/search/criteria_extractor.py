"""Criteria Extractor — DETERMINISTIC only, no LLM calls.

Regex and keyword extraction of structured search criteria from a
free-text property request.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from realyield.domain.enums import PropertyType
from .contracts import SearchCriteria

# Dubai districts, in match-priority order. The first name found as a
# case-insensitive substring wins; there is no longest-match step.
AREA_GAZETTEER = [
    "Downtown", "Dubai Marina", "JBR", "Palm Jumeirah", "Business Bay",
    "JVC", "JVT", "Jumeirah Village", "DIFC", "International City",
    "Sports City", "Motor City", "Arabian Ranches", "Mirdif", "Barsha",
    "Al Barsha", "Dubai Hills", "MBR City", "Dubai South", "Dubailand",
    "Dubai Creek", "Zabeel", "Deira", "Bur Dubai", "Jumeirah", "Umm Suqeim",
    "Discovery Gardens", "Gardens", "Jebel Ali", "Dubai Production City", "IMPZ",
    "Dubai Silicon Oasis", "DSO", "Al Furjan", "The Greens",
]

# Checked in order; first hit wins.
PROPERTY_TYPE_KEYWORDS = [
    (PropertyType.APARTMENT, re.compile(r'\b(?:apartments?|flats?)\b', re.IGNORECASE)),
    (PropertyType.VILLA, re.compile(r'\b(?:villas?|houses?)\b', re.IGNORECASE)),
    (PropertyType.TOWNHOUSE, re.compile(r'\btownhouses?\b', re.IGNORECASE)),
    (PropertyType.PENTHOUSE, re.compile(r'\bpenthouses?\b', re.IGNORECASE)),
]

# ---------------------------------------------------------------------------
# Bedroom patterns
# ---------------------------------------------------------------------------

# "2 bed", "3br", "4 bedrooms", "1 bhk"
BEDROOM_PATTERN = re.compile(
    r'\b(\d+)\s*(?:bedrooms?|beds?|bdr|bhk|br|bd)\b',
    re.IGNORECASE
)

STUDIO_PATTERN = re.compile(r'studio', re.IGNORECASE)

# ---------------------------------------------------------------------------
# Price patterns
# ---------------------------------------------------------------------------

# Number with optional comma groups and decimal, then an optional unit
# token: a currency word or a magnitude suffix.
_PRICE_TAIL = (
    r'\s*(?:AED)?\s*(?P<amount>\d+(?:,\d+)*(?:\.\d+)?)'
    r'\s*(?:AED|dhs|dirhams|k|million|m)?'
)

MAX_PRICE_PATTERN = re.compile(
    r'\b(?:under|below|less than|maximum|max|up to)' + _PRICE_TAIL,
    re.IGNORECASE
)

MIN_PRICE_PATTERN = re.compile(
    r'\b(?:above|over|more than|minimum|min|at least)' + _PRICE_TAIL,
    re.IGNORECASE
)

# Scale is read off the whole matched phrase, lead words included, so
# "max 500k" and "2000 dirhams" scale by a million. Checked in order.
PHRASE_SCALES = [
    ("m", Decimal(1_000_000)),  # also covers "million"
    ("k", Decimal(1_000)),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_price(match: re.Match) -> int | None:
    """Parse a matched price phrase, stripping commas and scaling by the phrase."""
    try:
        value = Decimal(match.group("amount").replace(",", ""))
    except InvalidOperation:
        return None
    phrase = match.group(0).lower()
    for marker, scale in PHRASE_SCALES:
        if marker in phrase:
            value *= scale
            break
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _find_area(text_lower: str) -> str | None:
    for area in AREA_GAZETTEER:
        if area.lower() in text_lower:
            return area
    return None


def _find_property_type(text: str) -> str | None:
    for property_type, pattern in PROPERTY_TYPE_KEYWORDS:
        if pattern.search(text):
            return property_type.value
    return None


def _find_bedrooms(text: str) -> str | None:
    bedroom_match = BEDROOM_PATTERN.search(text)
    if bedroom_match:
        return bedroom_match.group(1)
    if STUDIO_PATTERN.search(text):
        return "studio"
    return None


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def extract_criteria(text: str) -> SearchCriteria:
    """Extract search criteria from free text. Never raises; empty when nothing matches."""
    text = text or ""

    max_match = MAX_PRICE_PATTERN.search(text)
    min_match = MIN_PRICE_PATTERN.search(text)

    return SearchCriteria(
        area=_find_area(text.lower()),
        property_type=_find_property_type(text),
        bedrooms=_find_bedrooms(text),
        max_price=_parse_price(max_match) if max_match else None,
        min_price=_parse_price(min_match) if min_match else None,
    )
