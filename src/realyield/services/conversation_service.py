"""Conversation service — routes inbound chat messages and stores dialogue state.

Messages carrying a listing link go to the PropertyLinkAnalyzer and leave the
conversation's dialogue state alone. Everything else runs one turn of the
SearchDialogueEngine against the state stored in ``conversation_states``.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realyield.agents.search.contracts import (
    ConversationState,
    InboundMessage,
    Reply,
)
from realyield.agents.search.intent_patterns import find_listing_link
from realyield.domain.models import ConversationStateRecord
from realyield.services.listing_gateway import ListingGateway
from realyield.services.preference_store import PreferenceStore
from realyield.services.property_link_analyzer import PropertyLinkAnalyzer
from realyield.services.search_dialogue_engine import SearchDialogueEngine

logger = logging.getLogger(__name__)

ReplyCallback = Callable[[Reply], Any | Awaitable[Any]]


class ConversationService:
    """Per-request host for the listing search dialogue."""

    def __init__(self, db: AsyncSession, gateway: ListingGateway | None = None):
        self.db = db
        self.gateway = gateway or ListingGateway()
        self.store = PreferenceStore(db)
        self.engine = SearchDialogueEngine(self.gateway, self.store)
        self.analyzer = PropertyLinkAnalyzer(self.gateway)

    async def handle_message(
        self,
        message: InboundMessage,
        callback: ReplyCallback | None = None,
    ) -> Reply:
        """Process one inbound message and return the reply.

        Args:
            message: The user's turn.
            callback: Optional sync or async callable invoked with the reply.

        Returns:
            The Reply that was (or would be) delivered.
        """
        link = find_listing_link(message.text or "")
        if link:
            reply = await self.analyzer.analyse(link, source=message.source)
        else:
            state = await self.load_state(message.conversation_key)
            result = await self.engine.handle(state, message)
            await self.save_state(message, result.state)
            reply = result.reply

        if callback is not None:
            outcome = callback(reply)
            if inspect.isawaitable(outcome):
                await outcome
        return reply

    # ------------------------------------------------------------------
    # State storage
    # ------------------------------------------------------------------

    async def load_state(self, conversation_id: str) -> ConversationState:
        """Stored state for ``conversation_id``; IDLE when absent or unreadable."""
        try:
            result = await self.db.execute(
                select(ConversationStateRecord).where(
                    ConversationStateRecord.conversation_id == conversation_id
                )
            )
            record = result.scalar_one_or_none()
        except Exception as exc:
            logger.error("Failed to load dialogue state for %s: %s", conversation_id, exc)
            return ConversationState()

        if record is None:
            return ConversationState()
        return ConversationState.from_flags(record.flags)

    async def save_state(self, message: InboundMessage, state: ConversationState) -> None:
        """Upsert the conversation's flag bag. Failures are logged only."""
        conversation_id = message.conversation_key
        try:
            result = await self.db.execute(
                select(ConversationStateRecord).where(
                    ConversationStateRecord.conversation_id == conversation_id
                )
            )
            record = result.scalar_one_or_none()
            flags = state.as_flags()

            if record is None:
                self.db.add(ConversationStateRecord(
                    conversation_id=conversation_id,
                    user_id=message.user_id,
                    phase=state.phase.value,
                    flags=flags,
                ))
            else:
                record.user_id = message.user_id
                record.phase = state.phase.value
                record.flags = flags
            await self.db.commit()
        except Exception as exc:
            logger.error("Failed to store dialogue state for %s: %s", conversation_id, exc)
            try:
                await self.db.rollback()
            except Exception as rollback_exc:
                logger.warning("Rollback after state write failure also failed: %s", rollback_exc)
