"""Search dialogue engine — turns one inbound message into the next state and a reply.

The engine is a state-transition function over ``(state, message)``. It never
mutates the state it is given; the host stores whatever ``TurnResult.state``
comes back.

States: IDLE -> AWAITING_CRITERIA -> SHOWING_RESULTS (see DialoguePhase).
Transitions are tried in TRANSITIONS order; the first handler that returns a
result wins, and the criteria prompt is the default.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from realyield.agents.search.contracts import (
    ConversationState,
    InboundMessage,
    Reply,
    SearchCriteria,
    TurnResult,
)
from realyield.agents.search.criteria_extractor import extract_criteria
from realyield.agents.search.intent_patterns import (
    wants_more,
    wants_narrow,
    wants_new_listings,
    wants_save,
    wants_saved_search,
)
from realyield.agents.search.response_formatter import (
    describe_criteria,
    format_listings,
    get_template,
    render_listings,
)
from realyield.domain.enums import DialoguePhase, ReplyAction

logger = logging.getLogger(__name__)

P = DialoguePhase


def _any_text(_text: str) -> bool:
    return True


@dataclass(frozen=True)
class Transition:
    """One row of the transition table."""

    name: str
    phases: frozenset[DialoguePhase] | None  # None: any phase
    matches: Callable[[str], bool]
    handler: str


# ---------------------------------------------------------------------------
# Transition table, in priority order
# ---------------------------------------------------------------------------

TRANSITIONS: tuple[Transition, ...] = (
    Transition("show_more", frozenset({P.SHOWING_RESULTS}), wants_more, "_show_more"),
    Transition("narrow", frozenset({P.SHOWING_RESULTS}), wants_narrow, "_narrow"),
    Transition("save", frozenset({P.SHOWING_RESULTS}), wants_save, "_save"),
    Transition("criteria_reply", frozenset({P.AWAITING_CRITERIA}), _any_text, "_search_from_reply"),
    Transition("saved_search", None, wants_saved_search, "_saved_search"),
    Transition("direct_search", None, _any_text, "_direct_search"),
)


def has_enough_detail(criteria: SearchCriteria) -> bool:
    """An identifying field (area/type/bedrooms) plus a price bound or an area."""
    identifying = criteria.area or criteria.property_type or criteria.bedrooms
    anchored = criteria.max_price or criteria.min_price or criteria.area
    return bool(identifying and anchored)


class SearchDialogueEngine:
    """Conversational listing search over a ListingGateway and a PreferenceStore."""

    def __init__(self, gateway, store):
        self.gateway = gateway
        self.store = store

    async def handle(self, state: ConversationState, message: InboundMessage) -> TurnResult:
        """Run one turn and return the next state with the reply."""
        text = (message.text or "").strip()

        for transition in TRANSITIONS:
            if transition.phases is not None and state.phase not in transition.phases:
                continue
            if not transition.matches(text):
                continue
            handler = getattr(self, transition.handler)
            result = await handler(state, message, text)
            if result is not None:
                logger.info(
                    "Dialogue turn for %s: %s -> %s via %s",
                    message.user_id, state.phase.value, result.state.phase.value, result.branch,
                )
                return result

        return self._ask_for_criteria(state, message)

    # ------------------------------------------------------------------
    # Showing results
    # ------------------------------------------------------------------

    async def _show_more(self, state, message, text):
        try:
            listings = await self.gateway.search(state.last_criteria)
        except Exception as exc:
            logger.error("Error fetching additional listings: %s", exc)
            return self._result(state, message, get_template("more_results_error"), "show_more")

        if listings:
            reply_text = get_template("more_results", listings=render_listings(listings))
        else:
            reply_text = get_template("no_more_results")
        return self._result(state, message, reply_text, "show_more")

    async def _narrow(self, state, message, text):
        return self._result(
            state.moved_to(P.AWAITING_CRITERIA), message, get_template("refine_prompt"), "narrow",
        )

    async def _save(self, state, message, text):
        criteria = state.last_criteria
        try:
            await self.store.save(message.user_id, criteria)
        except Exception as exc:
            logger.error("Error saving search criteria: %s", exc)
        # Saving does not end the browsing session.
        return self._result(
            state, message,
            get_template("preferences_saved", summary=describe_criteria(criteria)),
            "save",
        )

    # ------------------------------------------------------------------
    # Awaiting criteria
    # ------------------------------------------------------------------

    async def _search_from_reply(self, state, message, text):
        criteria = extract_criteria(text)
        searched = state.moved_to(P.IDLE, criteria)

        try:
            listings = await self.gateway.search(criteria)
        except Exception as exc:
            logger.error("Error fetching property listings: %s", exc)
            return self._result(searched, message, get_template("search_error"), "criteria_reply")

        await self._persist_search(message.user_id, criteria, len(listings))
        return self._result(
            searched.moved_to(P.SHOWING_RESULTS), message, format_listings(listings), "criteria_reply",
        )

    # ------------------------------------------------------------------
    # Any state
    # ------------------------------------------------------------------

    async def _saved_search(self, state, message, text):
        try:
            stored = await self.store.load(message.user_id)
        except Exception as exc:
            logger.error("Error retrieving saved preferences: %s", exc)
            return self._result(
                state.moved_to(P.AWAITING_CRITERIA), message,
                get_template("saved_preferences_error"), "saved_search",
            )

        if stored is None:
            return self._result(
                state.moved_to(P.AWAITING_CRITERIA), message,
                get_template("no_saved_preferences"), "saved_search",
            )

        criteria = stored.to_criteria()
        try:
            listings = await self.gateway.search(criteria)
        except Exception as exc:
            logger.error("Error fetching listings for saved preferences: %s", exc)
            return self._result(
                state.moved_to(P.AWAITING_CRITERIA, criteria), message,
                get_template("saved_preferences_error"), "saved_search",
            )

        if listings:
            reply_text = get_template(
                "saved_results",
                latest_note=" (showing latest listings)" if wants_new_listings(text) else "",
                count=len(listings),
                listings=render_listings(listings),
            )
        else:
            reply_text = get_template("saved_no_matches")
        return self._result(
            state.moved_to(P.SHOWING_RESULTS, criteria), message, reply_text, "saved_search",
        )

    async def _direct_search(self, state, message, text):
        criteria = extract_criteria(text)
        if not has_enough_detail(criteria):
            return None

        try:
            listings = await self.gateway.search(criteria)
        except Exception as exc:
            logger.error("Error fetching property listings initially: %s", exc)
            return self._ask_for_criteria(state.moved_to(state.phase, criteria), message, after_failure=True)

        await self._persist_search(message.user_id, criteria, len(listings))
        return self._result(
            state.moved_to(P.SHOWING_RESULTS, criteria), message, format_listings(listings), "direct_search",
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ask_for_criteria(self, state, message, after_failure: bool = False) -> TurnResult:
        reply_text = get_template("criteria_prompt")
        if after_failure:
            reply_text = get_template("search_unavailable") + reply_text
        return self._result(state.moved_to(P.AWAITING_CRITERIA), message, reply_text, "ask_criteria")

    async def _persist_search(self, user_id: str, criteria: SearchCriteria, count: int) -> None:
        """Save preferences and the log count; failures never block the reply."""
        try:
            await self.store.save(user_id, criteria)
            await self.store.record_listing_count(user_id, count)
        except Exception as exc:
            logger.error("Error persisting search for %s: %s", user_id, exc)

    @staticmethod
    def _result(state: ConversationState, message: InboundMessage, text: str, branch: str) -> TurnResult:
        reply = Reply(
            text=text,
            actions=[ReplyAction.SEARCH_LISTINGS.value],
            source=message.source,
        )
        return TurnResult(state=state, reply=reply, branch=branch)
