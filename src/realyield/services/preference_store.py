"""Preference store — saved search criteria and the search audit log.

Saving is best-effort: every write path catches and logs its own failures
so the conversation always gets a reply.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realyield.agents.search.contracts import SearchCriteria, StoredPreference
from realyield.domain.models import SearchLog, SearchPreference

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Naive UTC, matching what SQLite DateTime columns hand back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PreferenceStore:
    """Upserts a user's latest criteria and appends search log entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, user_id: str, criteria: SearchCriteria) -> None:
        """Upsert preferences for ``user_id`` and append a search log entry.

        Existing rows are coalesced: only fields present in ``criteria``
        overwrite stored values. Never raises.
        """
        if not user_id:
            return

        try:
            result = await self.db.execute(
                select(SearchPreference).where(SearchPreference.user_id == user_id)
            )
            pref = result.scalar_one_or_none()
            columns = criteria.to_dict()
            now = _utcnow()

            if pref is not None:
                for column, value in columns.items():
                    setattr(pref, column, value)
                # last_updated must strictly increase per user
                if pref.last_updated is not None and now <= pref.last_updated:
                    now = pref.last_updated + timedelta(microseconds=1)
                pref.last_updated = now
            else:
                self.db.add(SearchPreference(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    last_updated=now,
                    **columns,
                ))

            self.db.add(SearchLog(
                search_id=str(uuid.uuid4()),
                user_id=user_id,
                timestamp=now,
                criteria_json=columns,
                listings_returned=0,
            ))
            await self.db.commit()
        except Exception as exc:
            logger.error("Error saving search preferences for %s: %s", user_id, exc)
            await self._safe_rollback()

    async def record_listing_count(self, user_id: str, count: int) -> None:
        """Set ``listings_returned`` on the user's most recent log entry. Never raises.

        The row is picked by latest timestamp rather than by search id, so
        two concurrent searches by one user can update each other's entry.
        """
        try:
            result = await self.db.execute(
                select(SearchLog)
                .where(SearchLog.user_id == user_id)
                .order_by(SearchLog.timestamp.desc())
                .limit(1)
            )
            entry = result.scalar_one_or_none()
            if entry is None:
                return
            entry.listings_returned = count
            await self.db.commit()
        except Exception as exc:
            logger.error("Error updating search_logs count for %s: %s", user_id, exc)
            await self._safe_rollback()

    async def load(self, user_id: str) -> StoredPreference | None:
        """Return the saved preference for ``user_id``, or None if there is none."""
        result = await self.db.execute(
            select(SearchPreference)
            .where(SearchPreference.user_id == user_id)
            .order_by(SearchPreference.last_updated.desc())
            .limit(1)
        )
        pref = result.scalar_one_or_none()
        if pref is None:
            return None
        return StoredPreference(
            user_id=pref.user_id,
            area=pref.area,
            property_type=pref.property_type,
            bedrooms=pref.bedrooms,
            max_price=pref.max_price,
            min_price=pref.min_price,
            last_updated=pref.last_updated,
        )

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except Exception as exc:
            logger.warning("Rollback after preference store failure also failed: %s", exc)
