"""
Database engine and session management.

The engine (and its connection pool) is the only process-wide resource: it
is created here, tables are created in the application lifespan, and the
pool is disposed at shutdown.  Each request gets its own ``AsyncSession``
through the ``get_db`` dependency.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from investment_tracker.core.config import Settings, settings


def build_engine(config: Settings) -> AsyncEngine:
    """Create the async engine for PostgreSQL or in-memory SQLite."""
    if config.USE_SQLITE:
        # StaticPool makes every connection share the same in-memory database;
        # otherwise each connection would see its own empty database.
        from sqlalchemy.pool import StaticPool

        return create_async_engine(
            config.DATABASE_URL,
            echo=config.DEBUG,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        config.DATABASE_URL,
        echo=config.DEBUG,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
        pool_recycle=config.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attribute access after commit() must not
    # trigger an implicit (sync) lazy load.
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


async def create_tables(bind: AsyncEngine) -> None:
    """Create all registered tables that do not exist yet."""
    import investment_tracker.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


engine = build_engine(settings)
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.

    The session is closed when the request finishes.
    """
    async with AsyncSessionLocal() as session:
        yield session
