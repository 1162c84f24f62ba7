"""Pydantic v2 schemas for API request/response validation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatMessageRequest(BaseModel):
    """One inbound chat turn."""

    text: str
    user_id: str = Field(..., min_length=1)
    conversation_id: str | None = None  # defaults to user_id
    source: str | None = None


class ChatMessageResponse(BaseModel):
    """Reply to a chat turn."""

    text: str
    actions: list[str] = []
    source: str | None = None
    attachments: list[dict] = []


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


class PreferenceResponse(BaseModel):
    """A user's saved search criteria."""

    user_id: str
    area: str | None = None
    property_type: str | None = None
    bedrooms: str | None = None
    max_price: int | None = None
    min_price: int | None = None
    last_updated: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
