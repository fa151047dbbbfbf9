"""
Generic async repository (Data Access Layer).

Implements the Repository pattern on top of SQLAlchemy's ``AsyncSession``.
Concrete repositories inherit from ``BaseRepository[T]`` and add
entity-specific queries.

Store failures:
    Every operation runs through ``_run``.  Any ``SQLAlchemyError``
    (connection loss, constraint violation, type mismatch) is logged here
    with its traceback, the session is rolled back so it is not left with a
    dirty transaction, and the original exception is re-raised unchanged.
    Nothing is retried.
"""

import logging
from typing import Any, Awaitable, Callable, Generic, Optional, Type, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)
T = TypeVar("T")


class BaseRepository(Generic[ModelType]):
    """
    Generic CRUD repository for SQLModel entities with a single-column key.

    Parameters
    ----------
    model : Type[ModelType]
        The SQLModel class this repository manages.
    db : AsyncSession
        An active async database session (injected per-request).
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    # ── Internal helpers ──

    async def _run(self, action: str, func: Callable[[], Awaitable[T]]) -> T:
        """Execute ``func``; on a store error log, roll back and re-raise."""
        try:
            return await func()
        except SQLAlchemyError:
            logger.exception("Store error during %s on %s", action, self.model.__name__)
            await self.db.rollback()
            raise

    def _pk_column(self) -> Any:
        (column,) = self.model.__table__.primary_key.columns
        return column

    # ── CRUD ──

    async def get(self, id: Any) -> Optional[ModelType]:
        """Fetch a single entity by primary key.  Returns ``None`` if not found."""

        async def _get() -> Optional[ModelType]:
            return await self.db.get(self.model, id)

        return await self._run("get", _get)

    async def create(self, obj_in: ModelType) -> ModelType:
        """Insert a new entity and return it refreshed with store defaults."""

        async def _create() -> ModelType:
            self.db.add(obj_in)
            await self.db.commit()
            await self.db.refresh(obj_in)
            return obj_in

        return await self._run("create", _create)

    async def update(self, entity: ModelType) -> ModelType:
        """
        Persist changes to an entity.

        The caller mutates the entity's attributes first; the merged instance
        is committed, then refreshed so the return value is the stored row.
        """

        async def _update() -> ModelType:
            merged = await self.db.merge(entity)
            await self.db.commit()
            await self.db.refresh(merged)
            return merged

        return await self._run("update", _update)

    async def delete(self, id: Any) -> bool:
        """
        Delete an entity by primary key with a single ``DELETE`` statement.

        Returns ``True`` if a row was removed, ``False`` if none matched.
        """

        async def _delete() -> bool:
            stmt = sa_delete(self.model).where(self._pk_column() == id)
            result = await self.db.execute(stmt)
            await self.db.commit()
            return (result.rowcount or 0) > 0

        return await self._run("delete", _delete)
