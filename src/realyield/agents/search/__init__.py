"""Listing search dialogue — deterministic building blocks.

Modules:
1. CriteriaExtractor (deterministic regex/keyword extraction)
2. Intent patterns (branch routing keywords, listing link detection)
3. ResponseFormatter (listing blocks and reply templates)
"""

from .contracts import (
    ConversationState,
    InboundMessage,
    Listing,
    PropertyDetail,
    Reply,
    SearchCriteria,
    StoredPreference,
    TurnResult,
)
from .criteria_extractor import extract_criteria
from .intent_patterns import find_listing_link
from .response_formatter import describe_criteria, format_listings, get_template

__all__ = [
    "ConversationState",
    "InboundMessage",
    "Listing",
    "PropertyDetail",
    "Reply",
    "SearchCriteria",
    "StoredPreference",
    "TurnResult",
    "extract_criteria",
    "find_listing_link",
    "describe_criteria",
    "format_listings",
    "get_template",
]
