"""
Shared pytest fixtures.

All tests run with ``USE_SQLITE=true``: service unit tests use mocked
repositories, while store-level tests get a fresh in-memory aiosqlite
database per test so no external database is needed.
"""

import os
import tempfile

# Must be set before anything imports investment_tracker.core.config.
os.environ["USE_SQLITE"] = "true"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="investment-tracker-logs-"))

from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from investment_tracker.db.session import build_sessionmaker, create_tables  # noqa: E402
from investment_tracker.models.investment import Investment  # noqa: E402
from investment_tracker.repositories.investment_repo import InvestmentRepository  # noqa: E402
from investment_tracker.services.investment_service import InvestmentService  # noqa: E402

# ────────────────────────────────────────────────────────────────────────────
# Factory helpers
# ────────────────────────────────────────────────────────────────────────────

INVESTMENT_ID = 1
CREATED_AT = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def make_investment(
    *,
    id: int = INVESTMENT_ID,
    company_name: str = "Apple Inc.",
    ticker_symbol: str = "AAPL",
    shares: int = 100,
    purchase_price: Decimal = Decimal("150.25"),
    purchase_date: date = date(2024, 1, 15),
    created_at: datetime | None = None,
) -> Investment:
    """Create an Investment row object with sensible test defaults."""
    return Investment(
        id=id,
        company_name=company_name,
        ticker_symbol=ticker_symbol,
        shares=shares,
        purchase_price=purchase_price,
        purchase_date=purchase_date,
        created_at=created_at or CREATED_AT,
    )


def create_payload(**overrides) -> dict:
    """A valid ``createInvestment`` body; keyword arguments replace fields."""
    payload = {
        "company_name": "Apple Inc.",
        "ticker_symbol": "aapl",
        "shares": 100,
        "purchase_price": 150.25,
        "purchase_date": "2024-01-15",
    }
    payload.update(overrides)
    return payload


# ────────────────────────────────────────────────────────────────────────────
# Fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest.fixture()
def mock_repo():
    """A mocked InvestmentRepository."""
    repo = AsyncMock()
    repo.db = AsyncMock()
    return repo


@pytest_asyncio.fixture()
async def sqlite_engine():
    """A fresh in-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(sqlite_engine):
    """An AsyncSession bound to the per-test SQLite database."""
    session_factory = build_sessionmaker(sqlite_engine)
    async with session_factory() as session:
        yield session


@pytest.fixture()
def store_service(db_session) -> InvestmentService:
    """An InvestmentService backed by the real repository and SQLite store."""
    return InvestmentService(InvestmentRepository(Investment, db_session))
