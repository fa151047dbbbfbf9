"""
Seed script: populates an empty store with sample investments for
development and demos.

Usage:
    python -m investment_tracker.seed

Idempotent: nothing is inserted when the table already holds rows.  Samples
go through :class:`InvestmentService`, so they receive the same validation
and ticker normalisation as API input.
"""

import asyncio
import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from investment_tracker.core.logging import setup_logging
from investment_tracker.db.session import AsyncSessionLocal, create_tables, engine
from investment_tracker.models.investment import Investment
from investment_tracker.repositories.investment_repo import InvestmentRepository
from investment_tracker.schemas.investment import InvestmentCreate
from investment_tracker.services.investment_service import InvestmentService

logger = logging.getLogger(__name__)

SAMPLE_INVESTMENTS: List[InvestmentCreate] = [
    InvestmentCreate(
        company_name="Apple Inc.",
        ticker_symbol="aapl",
        shares=100,
        purchase_price=150.25,
        purchase_date="2024-01-15",
    ),
    InvestmentCreate(
        company_name="Microsoft Corporation",
        ticker_symbol="msft",
        shares=40,
        purchase_price=402.56,
        purchase_date="2024-02-20",
    ),
    InvestmentCreate(
        company_name="NVIDIA Corporation",
        ticker_symbol="nvda",
        shares=25,
        purchase_price=875.28,
        purchase_date="2024-03-08",
    ),
    InvestmentCreate(
        company_name="Alphabet Inc.",
        ticker_symbol="googl",
        shares=60,
        purchase_price=141.8,
        purchase_date="2024-04-02",
    ),
]


async def seed_investments(session: AsyncSession) -> int:
    """Insert the samples if the table is empty.  Returns the number inserted."""
    existing = await session.scalar(select(func.count()).select_from(Investment))
    if existing:
        logger.info("Store already holds %d investments; skipping seed", existing)
        return 0

    service = InvestmentService(InvestmentRepository(Investment, session))
    for sample in SAMPLE_INVESTMENTS:
        await service.create_investment(sample)
    logger.info("Seeded %d investments", len(SAMPLE_INVESTMENTS))
    return len(SAMPLE_INVESTMENTS)


async def seed() -> None:
    """Create tables and insert sample data if the store is empty."""
    await create_tables(engine)
    try:
        async with AsyncSessionLocal() as session:
            await seed_investments(session)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
