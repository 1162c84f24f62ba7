"""Typed dataclasses for listing search I/O contracts."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from realyield.domain.enums import DialoguePhase

# Host flag-bag key <-> criteria field
_CAMEL_KEYS = {
    "area": "area",
    "property_type": "propertyType",
    "bedrooms": "bedrooms",
    "max_price": "maxPrice",
    "min_price": "minPrice",
}
_SNAKE_KEYS = {camel: snake for snake, camel in _CAMEL_KEYS.items()}


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(float(str(value).replace(",", "")))
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", ""))
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class SearchCriteria:
    """Partial structured search extracted from one message.

    Every field is optional; an empty instance means "no constraint known yet".
    """
    area: str | None = None
    property_type: str | None = None
    bedrooms: str | None = None  # digit string or "studio"
    max_price: int | None = None
    min_price: int | None = None

    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_dict(self, camel: bool = False) -> dict:
        """Present fields only, keyed by field name (or host camelCase key)."""
        out = {}
        for name, camel_name in _CAMEL_KEYS.items():
            value = getattr(self, name)
            if value is not None and value != "":
                out[camel_name if camel else name] = value
        return out

    @classmethod
    def from_dict(cls, data: dict | None) -> "SearchCriteria":
        """Build criteria from a stored/host dict, accepting either key style."""
        if not data:
            return cls()
        values = {}
        for key, value in data.items():
            name = _SNAKE_KEYS.get(key, key)
            if name in _CAMEL_KEYS and value is not None and value != "":
                values[name] = value
        if "bedrooms" in values:
            values["bedrooms"] = str(values["bedrooms"])
        for price_key in ("max_price", "min_price"):
            if price_key in values:
                values[price_key] = _to_int(values[price_key])
        return cls(**values)


@dataclass(frozen=True)
class Listing:
    """One search result as shown to the user."""
    title: str
    price: str
    link: str


@dataclass
class PropertyDetail:
    """Single-listing record returned by the detail endpoint."""
    title: str = ""
    price: float | None = None
    size: float | None = None
    bedrooms: str | None = None
    bathrooms: str | None = None
    location: str = ""
    furnished: bool = False
    amenities: list[str] = field(default_factory=list)
    image_url: str | None = None

    @classmethod
    def from_payload(cls, data: dict) -> "PropertyDetail":
        """Parse the provider's JSON object; raises ValueError if it isn't one."""
        if not isinstance(data, dict):
            raise ValueError(f"detail payload is {type(data).__name__}, expected object")

        amenities = data.get("amenities") or []
        if not isinstance(amenities, list):
            amenities = [amenities]

        furnishing = data.get("furnishing", data.get("furnished"))
        if isinstance(furnishing, str):
            furnished = furnishing.strip().upper() in ("YES", "TRUE", "FURNISHED")
        else:
            furnished = bool(furnishing)

        bedrooms = data.get("bedrooms")
        bathrooms = data.get("bathrooms")
        return cls(
            title=data.get("title") or "",
            price=_to_float(data.get("price")),
            size=_to_float(data.get("size")) or None,
            bedrooms=str(bedrooms) if bedrooms is not None else None,
            bathrooms=str(bathrooms) if bathrooms is not None else None,
            location=data.get("location") or "",
            furnished=furnished,
            amenities=[str(a) for a in amenities],
            image_url=data.get("image") or data.get("image_url") or None,
        )


@dataclass
class StoredPreference:
    """A user's saved criteria as read back from the preferences table."""
    user_id: str
    area: str | None = None
    property_type: str | None = None
    bedrooms: str | None = None
    max_price: int | None = None
    min_price: int | None = None
    last_updated: datetime | None = None

    def to_criteria(self) -> SearchCriteria:
        return SearchCriteria(
            area=self.area or None,
            property_type=self.property_type or None,
            bedrooms=self.bedrooms or None,
            max_price=_to_int(self.max_price) or None,
            min_price=_to_int(self.min_price) or None,
        )


@dataclass(frozen=True)
class ConversationState:
    """Per-conversation dialogue state, threaded through each turn."""
    phase: DialoguePhase = DialoguePhase.IDLE
    last_criteria: SearchCriteria = field(default_factory=SearchCriteria)

    @property
    def awaiting_criteria(self) -> bool:
        return self.phase == DialoguePhase.AWAITING_CRITERIA

    @property
    def showing_results(self) -> bool:
        return self.phase == DialoguePhase.SHOWING_RESULTS

    def moved_to(self, phase: DialoguePhase, last_criteria: SearchCriteria | None = None) -> "ConversationState":
        if last_criteria is None:
            return replace(self, phase=phase)
        return replace(self, phase=phase, last_criteria=last_criteria)

    def as_flags(self) -> dict:
        """Render as the host's flag bag."""
        return {
            "awaitingPropertyCriteria": self.awaiting_criteria,
            "showingListingResults": self.showing_results,
            "lastSearchCriteria": self.last_criteria.to_dict(camel=True),
        }

    @classmethod
    def from_flags(cls, values: dict | None) -> "ConversationState":
        """Read a host flag bag. Showing results wins if both flags are set."""
        values = values or {}
        if values.get("showingListingResults") is True:
            phase = DialoguePhase.SHOWING_RESULTS
        elif values.get("awaitingPropertyCriteria") is True:
            phase = DialoguePhase.AWAITING_CRITERIA
        else:
            phase = DialoguePhase.IDLE
        return cls(phase=phase, last_criteria=SearchCriteria.from_dict(values.get("lastSearchCriteria")))


@dataclass(frozen=True)
class InboundMessage:
    """One user turn as delivered by the host."""
    text: str
    user_id: str
    conversation_id: str | None = None
    source: str | None = None

    @property
    def conversation_key(self) -> str:
        return self.conversation_id or self.user_id


@dataclass
class Reply:
    """Outbound reply handed back to the host."""
    text: str
    actions: list[str] = field(default_factory=list)
    source: str | None = None
    attachments: list[dict] = field(default_factory=list)


@dataclass
class TurnResult:
    """Output of one dialogue turn: the next state and the reply."""
    state: ConversationState
    reply: Reply
    branch: str = "default"
