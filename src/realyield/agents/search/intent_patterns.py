"""Intent patterns — keyword regexes that route a message to a dialogue branch."""

import re

# While results are on screen
SHOW_MORE_PATTERN = re.compile(r'\b(?:show|send|get|give)\s+(?:more|next)\b', re.IGNORECASE)
# Substring match; "less than 1M" while browsing asks to refine
NARROW_PATTERN = re.compile(
    r'(?:narrow|filter|tighten|refine|specific|less)',
    re.IGNORECASE
)
SAVE_PATTERN = re.compile(
    r'\b(?:save|store|remember|keep)\s+(?:this|these|search|criteria)',
    re.IGNORECASE
)

# From any state
SAVED_SEARCH_PATTERN = re.compile(
    r'\b(?:show|get|what|my)\s+(?:previous|saved|last|recent)?\s*(?:property\s+)?(?:search|criteria|preferences)',
    re.IGNORECASE
)
NEW_LISTINGS_PATTERN = re.compile(
    r'\b(?:new|latest|recent|updated)\s+(?:listings|properties|options)\b',
    re.IGNORECASE
)

# Listing links pasted for analysis
LISTING_LINK_PATTERN = re.compile(r'https?://(?:www\.)?propertyfinder\.ae/[^\s>]+', re.IGNORECASE)


def wants_more(text: str) -> bool:
    return bool(SHOW_MORE_PATTERN.search(text))


def wants_narrow(text: str) -> bool:
    return bool(NARROW_PATTERN.search(text))


def wants_save(text: str) -> bool:
    return bool(SAVE_PATTERN.search(text))


def wants_new_listings(text: str) -> bool:
    return bool(NEW_LISTINGS_PATTERN.search(text))


def wants_saved_search(text: str) -> bool:
    """True for "show my saved search" style asks and "new listings" asks."""
    return bool(SAVED_SEARCH_PATTERN.search(text)) or wants_new_listings(text)


def find_listing_link(text: str) -> str | None:
    """Return the first listing link in the text, if any."""
    match = LISTING_LINK_PATTERN.search(text or "")
    return match.group(0) if match else None
