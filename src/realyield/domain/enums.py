"""Domain enumerations for RealYield listing search.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class PropertyType(str, Enum):
    """Property categories the extractor can recognise."""

    APARTMENT = "apartment"
    VILLA = "villa"
    TOWNHOUSE = "townhouse"
    PENTHOUSE = "penthouse"


class DialoguePhase(str, Enum):
    """Where a conversation sits in the listing search dialogue."""

    IDLE = "idle"
    AWAITING_CRITERIA = "awaiting_criteria"
    SHOWING_RESULTS = "showing_results"


class ReplyAction(str, Enum):
    """Action tags attached to outbound replies."""

    SEARCH_LISTINGS = "SEARCH_LISTINGS"
    ANALYSE_PROPERTY_LINK = "ANALYSE_PROPERTY_LINK"
