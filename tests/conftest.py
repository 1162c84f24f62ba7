"""Shared test infrastructure for the RealYield test suite.

Provides:
- db_session: async SQLite in-memory session with all tables created
- fake_gateway: ListingGateway stand-in with AsyncMock search/detail calls
- make_listings: factory for Listing results
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import Base first, then models to register all tables
from realyield.infra.database import Base

import realyield.domain.models  # noqa: F401

from realyield.agents.search.contracts import Listing


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Creates a fresh engine + tables for each test, yields a session,
    then rolls back and tears down.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Listing gateway fake
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_gateway():
    """Gateway double: search returns [] and fetch_detail returns None by default."""
    gateway = MagicMock()
    gateway.search = AsyncMock(return_value=[])
    gateway.fetch_detail = AsyncMock(return_value=None)
    gateway.check_reachable = AsyncMock(return_value=True)
    return gateway


# ---------------------------------------------------------------------------
# Listing factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_listings():
    """Factory that builds ``count`` numbered listings.

    Usage:
        listings = make_listings(3)
    """
    def _make(count: int = 2) -> list[Listing]:
        return [
            Listing(
                title=f"Marina View {i}",
                price=f"AED {i},000,000",
                link=f"https://www.propertyfinder.ae/en/plp/buy/apartment-{i}.html",
            )
            for i in range(1, count + 1)
        ]

    return _make
