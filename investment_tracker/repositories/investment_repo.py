"""
Investment repository: data-access layer for the ``investments`` table.

Adds the listing query on top of the generic CRUD in :class:`BaseRepository`.
"""

from typing import List

from sqlalchemy.future import select

from investment_tracker.models.investment import Investment
from investment_tracker.repositories.base import BaseRepository


class InvestmentRepository(BaseRepository[Investment]):
    """Concrete repository for :class:`Investment` entities."""

    async def list_recent(self) -> List[Investment]:
        """
        Return every investment, most recently created first.

        Rows sharing a ``created_at`` value come back in descending ``id``
        order so the listing is deterministic.
        """

        async def _list() -> List[Investment]:
            stmt = select(self.model).order_by(
                self.model.created_at.desc(), self.model.id.desc()
            )
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._run("list", _list)
