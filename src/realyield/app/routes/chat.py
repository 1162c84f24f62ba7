"""Chat routes — the HTTP front door for the listing search dialogue.

POST /api/chat/message runs one conversational turn (or a listing link
analysis) and returns the reply. GET /api/chat/preferences/{user_id} reads
back the criteria a user last saved.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realyield.agents.search.contracts import InboundMessage
from realyield.domain.schemas import (
    ChatMessageRequest,
    ChatMessageResponse,
    PreferenceResponse,
)
from realyield.infra.database import get_db
from realyield.services.conversation_service import ConversationService
from realyield.services.listing_gateway import ListingGateway
from realyield.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


def get_listing_gateway() -> ListingGateway:
    """FastAPI dependency: listing gateway built from settings."""
    return ListingGateway()


@router.post("/message", response_model=ChatMessageResponse)
async def post_message(
    body: ChatMessageRequest,
    db: AsyncSession = Depends(get_db),
    gateway: ListingGateway = Depends(get_listing_gateway),
):
    """Handle one chat turn and return the reply."""
    message = InboundMessage(
        text=body.text,
        user_id=body.user_id,
        conversation_id=body.conversation_id,
        source=body.source,
    )
    service = ConversationService(db, gateway)
    try:
        reply = await service.handle_message(message)
    except Exception as exc:
        logger.exception("Chat turn failed for user %s: %s", body.user_id, exc)
        raise HTTPException(status_code=500, detail="Failed to process message")

    return ChatMessageResponse(
        text=reply.text,
        actions=reply.actions,
        source=reply.source,
        attachments=reply.attachments,
    )


@router.get("/preferences/{user_id}", response_model=PreferenceResponse)
async def get_preferences(user_id: str, db: AsyncSession = Depends(get_db)):
    """Return the user's saved search preferences."""
    try:
        stored = await PreferenceStore(db).load(user_id)
    except SQLAlchemyError as exc:
        logger.error("Failed to load preferences for %s: %s", user_id, exc)
        raise HTTPException(status_code=500, detail="Failed to load preferences")

    if stored is None:
        raise HTTPException(status_code=404, detail="No saved preferences")
    return PreferenceResponse.model_validate(stored)
