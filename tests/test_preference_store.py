"""Tests for PreferenceStore — upsert coalescing, search log, best-effort writes."""

from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from realyield.agents.search.contracts import SearchCriteria
from realyield.domain.models import SearchLog, SearchPreference
from realyield.services.preference_store import PreferenceStore


async def _preferences(db_session, user_id="u1"):
    result = await db_session.execute(
        select(SearchPreference).where(SearchPreference.user_id == user_id)
    )
    return result.scalars().all()


async def _logs(db_session, user_id="u1"):
    result = await db_session.execute(
        select(SearchLog).where(SearchLog.user_id == user_id).order_by(SearchLog.timestamp)
    )
    return result.scalars().all()


# ---------------------------------------------------------------------------
# save()
# ---------------------------------------------------------------------------

class TestSave:
    async def test_inserts_preference_and_log(self, db_session):
        store = PreferenceStore(db_session)
        await store.save("u1", SearchCriteria(area="JVC", bedrooms="2", max_price=1_500_000))

        prefs = await _preferences(db_session)
        assert len(prefs) == 1
        assert prefs[0].area == "JVC"
        assert prefs[0].bedrooms == "2"
        assert prefs[0].max_price == 1_500_000
        assert prefs[0].property_type is None

        logs = await _logs(db_session)
        assert len(logs) == 1
        assert logs[0].criteria_json == {"area": "JVC", "bedrooms": "2", "max_price": 1_500_000}
        assert logs[0].listings_returned == 0

    async def test_upsert_coalesces_missing_fields(self, db_session):
        store = PreferenceStore(db_session)
        await store.save("u1", SearchCriteria(area="JVC", max_price=1_000_000))
        first_updated = (await _preferences(db_session))[0].last_updated

        await store.save("u1", SearchCriteria(bedrooms="3"))

        prefs = await _preferences(db_session)
        assert len(prefs) == 1
        assert prefs[0].area == "JVC"
        assert prefs[0].max_price == 1_000_000
        assert prefs[0].bedrooms == "3"
        assert prefs[0].last_updated > first_updated
        assert len(await _logs(db_session)) == 2

    async def test_blank_user_is_noop(self, db_session):
        await PreferenceStore(db_session).save("", SearchCriteria(area="JVC"))
        assert await _preferences(db_session, "") == []

    async def test_failure_is_swallowed_and_rolled_back(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db locked")))
        db.rollback = AsyncMock()

        await PreferenceStore(db).save("u1", SearchCriteria(area="JVC"))

        db.rollback.assert_awaited_once()


# ---------------------------------------------------------------------------
# record_listing_count()
# ---------------------------------------------------------------------------

class TestRecordListingCount:
    async def test_updates_most_recent_entry(self, db_session):
        store = PreferenceStore(db_session)
        await store.save("u1", SearchCriteria(area="JVC"))
        await store.save("u1", SearchCriteria(area="JBR"))

        await store.record_listing_count("u1", 4)

        logs = await _logs(db_session)
        assert [log.listings_returned for log in logs] == [0, 4]

    async def test_no_entries_is_noop(self, db_session):
        await PreferenceStore(db_session).record_listing_count("nobody", 3)
        assert await _logs(db_session, "nobody") == []

    async def test_failure_is_swallowed(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=RuntimeError("connection reset"))
        db.rollback = AsyncMock()

        await PreferenceStore(db).record_listing_count("u1", 2)

        db.rollback.assert_awaited_once()


# ---------------------------------------------------------------------------
# load()
# ---------------------------------------------------------------------------

class TestLoad:
    async def test_returns_saved_preference(self, db_session):
        store = PreferenceStore(db_session)
        await store.save("u1", SearchCriteria(area="Dubai Hills", property_type="villa", min_price=3_000_000))

        stored = await store.load("u1")

        assert stored.user_id == "u1"
        assert stored.to_criteria() == SearchCriteria(
            area="Dubai Hills", property_type="villa", min_price=3_000_000,
        )
        assert stored.last_updated is not None

    async def test_none_when_absent(self, db_session):
        assert await PreferenceStore(db_session).load("u1") is None
