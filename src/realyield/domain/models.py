"""Persistence models for saved preferences, search audit logs and dialogue state."""

import uuid

from sqlalchemy import Column, DateTime, Integer, String, JSON
from sqlalchemy.sql import func

from realyield.infra.database import Base


class SearchPreference(Base):
    """Most recent search criteria per user (one row per user, upserted)."""

    __tablename__ = "preferences"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, unique=True, index=True)
    area = Column(String(100), nullable=True)
    property_type = Column(String(30), nullable=True)
    bedrooms = Column(String(20), nullable=True)  # digit string or "studio"
    max_price = Column(Integer, nullable=True)
    min_price = Column(Integer, nullable=True)
    last_updated = Column(DateTime, nullable=False, default=func.now())


class SearchLog(Base):
    """Append-only audit record, one per search attempt."""

    __tablename__ = "search_logs"

    search_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False, default=func.now())
    criteria_json = Column(JSON, default=dict)
    listings_returned = Column(Integer, default=0)


class ConversationStateRecord(Base):
    """Dialogue state stored by the host, keyed by conversation.

    ``flags`` holds the host flag bag (awaitingPropertyCriteria,
    showingListingResults, lastSearchCriteria); ``phase`` is derived from it.
    """

    __tablename__ = "conversation_states"

    conversation_id = Column(String(255), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    phase = Column(String(30), default="idle")
    flags = Column(JSON, default=dict)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
