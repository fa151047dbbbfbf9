"""
Investment service: business logic for recording stock purchases.

Sits between validated procedure inputs and the repository.  It normalises
ticker symbols to upper case and converts stored rows into
:class:`InvestmentRead` (price as a cent-rounded decimal, purchase date as a
calendar date, ``created_at`` as an aware timestamp).

"Not found" is a normal outcome here: lookups and updates return ``None`` and
deletes return ``False``.  Store errors are logged by the repository and
propagate unchanged.

There is no version column, so two concurrent updates of the same row are
last-write-wins.
"""

import logging
from typing import List, Optional

from investment_tracker.models.investment import INTEGER_MAX, Investment
from investment_tracker.repositories.investment_repo import InvestmentRepository
from investment_tracker.schemas.investment import (
    InvestmentCreate,
    InvestmentDelete,
    InvestmentRead,
    InvestmentUpdate,
)

logger = logging.getLogger(__name__)


def normalize_ticker(symbol: str) -> str:
    return symbol.upper()


def is_storable_id(investment_id: int) -> bool:
    """Whether ``investment_id`` fits the integer key column at all."""
    return 1 <= investment_id <= INTEGER_MAX


class InvestmentService:
    """Encapsulates CRUD + normalisation for :class:`Investment`."""

    def __init__(self, repo: InvestmentRepository):
        self._repo = repo

    # ── Queries ──

    async def list_investments(self) -> List[InvestmentRead]:
        """Return every investment, newest first.  Empty list when there are none."""
        rows = await self._repo.list_recent()
        return [InvestmentRead.model_validate(row) for row in rows]

    async def get_investment(self, investment_id: int) -> Optional[InvestmentRead]:
        """Return the investment with ``investment_id``, or ``None``."""
        row = await self._repo.get(investment_id) if is_storable_id(investment_id) else None
        if row is None:
            logger.debug("Investment %s not found", investment_id)
            return None
        return InvestmentRead.model_validate(row)

    # ── Commands ──

    async def create_investment(self, data: InvestmentCreate) -> InvestmentRead:
        """Insert a new investment; the store assigns ``id`` and ``created_at``."""
        investment = Investment(
            company_name=data.company_name,
            ticker_symbol=normalize_ticker(data.ticker_symbol),
            shares=data.shares,
            purchase_price=data.purchase_price,
            purchase_date=data.purchase_date,
        )
        created = await self._repo.create(investment)
        logger.info(
            "Created investment %s: %d x %s @ %s on %s",
            created.id,
            created.shares,
            created.ticker_symbol,
            created.purchase_price,
            created.purchase_date,
        )
        return InvestmentRead.model_validate(created)

    async def update_investment(self, data: InvestmentUpdate) -> Optional[InvestmentRead]:
        """
        Apply the supplied fields to an existing investment.

        Returns ``None`` when the id does not exist.  An input carrying only
        ``id`` changes nothing and returns the current row.
        """
        existing = await self._repo.get(data.id) if is_storable_id(data.id) else None
        if existing is None:
            logger.debug("Investment %s not found for update", data.id)
            return None

        changes = data.changes()
        if not changes:
            return InvestmentRead.model_validate(existing)

        if "ticker_symbol" in changes:
            changes["ticker_symbol"] = normalize_ticker(changes["ticker_symbol"])
        for field, value in changes.items():
            setattr(existing, field, value)

        updated = await self._repo.update(existing)
        logger.info("Updated investment %s (%s)", updated.id, ", ".join(sorted(changes)))
        return InvestmentRead.model_validate(updated)

    async def delete_investment(self, data: InvestmentDelete) -> bool:
        """Hard-delete an investment.  ``False`` if no row matched."""
        deleted = await self._repo.delete(data.id) if is_storable_id(data.id) else False
        if deleted:
            logger.info("Deleted investment %s", data.id)
        else:
            logger.debug("Investment %s not found for delete", data.id)
        return deleted
