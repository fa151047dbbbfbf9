"""
Investment Tracker API: application entry-point.

Initializes the FastAPI application, registers middleware, exception handlers
and the RPC router, and manages the store lifecycle (tables created on
startup, connection pool disposed on shutdown).
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from investment_tracker import __version__
from investment_tracker.api.router import api_router
from investment_tracker.core.config import settings
from investment_tracker.core.exceptions import add_exception_handlers
from investment_tracker.core.logging import setup_logging
from investment_tracker.db.session import create_tables, engine
from investment_tracker.middleware import RequestIDMiddleware, RequestTimingMiddleware

setup_logging()
logger = logging.getLogger(__name__)

STARTUP_MAX_ATTEMPTS = 5
STARTUP_RETRY_DELAY = 2  # seconds, doubled after each failed attempt


# ────────────────────────────────────────────────────────────────────────────
# Application lifespan
# ────────────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Acquire the store at startup and release it at shutdown.

    Startup creates missing tables, backing off while the database comes up.
    If it never does, the app still starts and procedures that touch the
    store fail with 500 until it is reachable.  Shutdown disposes of the pool.
    """
    delay = STARTUP_RETRY_DELAY
    for attempt in range(1, STARTUP_MAX_ATTEMPTS + 1):
        try:
            logger.info(
                "Connecting to database (attempt %d/%d)", attempt, STARTUP_MAX_ATTEMPTS
            )
            await create_tables(engine)
            logger.info("Database tables ready")
            break
        except Exception as exc:
            if attempt < STARTUP_MAX_ATTEMPTS:
                logger.warning(
                    "Database connection failed (attempt %d/%d): %s; retrying in %ds",
                    attempt,
                    STARTUP_MAX_ATTEMPTS,
                    exc,
                    delay,
                )
                await asyncio.sleep(delay)
                delay *= 2
            else:
                logger.error(
                    "Could not connect to database after %d attempts, starting in "
                    "degraded mode. Last error: %s",
                    STARTUP_MAX_ATTEMPTS,
                    exc,
                )

    yield

    logger.info("Shutting down, disposing connection pool")
    await engine.dispose()


# ────────────────────────────────────────────────────────────────────────────
# FastAPI application instance
# ────────────────────────────────────────────────────────────────────────────


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=__version__,
        description="Record, list, edit and delete stock-purchase investments.",
        lifespan=lifespan,
    )

    # Outermost middleware is added last.
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_exception_handlers(app)
    app.include_router(api_router, prefix=settings.RPC_PREFIX)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn on the configured port."""
    logger.info(
        "RPC server listening on %s:%d%s",
        settings.SERVER_HOST,
        settings.SERVER_PORT,
        settings.RPC_PREFIX,
    )
    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT, log_config=None)


if __name__ == "__main__":
    run()
