"""
Global exception handlers for the FastAPI application.

Every error response follows one JSON envelope::

    {
        "error": true,
        "message": "<human-readable description>"
    }

Validation failures add a ``details`` list.  "Not found" is not an error in
this API (procedures return ``null`` / ``false``), so there is no 404 domain
exception; a 404 only occurs for an unknown procedure path.
"""

import logging
from typing import Any, Dict, List, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

STORE_ERROR_MESSAGE = "A database error occurred."
INTERNAL_ERROR_MESSAGE = "Internal Server Error."


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic error dicts into ``{"field", "message"}`` pairs.

    The ``body`` / ``query`` location prefix FastAPI adds is dropped, so the
    field path matches the procedure input document.
    """
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query"):
            loc = loc[1:]
        details.append({"field": " -> ".join(loc) or "input", "message": err["msg"]})
    return details


def add_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI application instance."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle standard HTTP exceptions (e.g. 404 for an unknown procedure)."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": True, "message": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report which input fields failed and why (422)."""
        return JSONResponse(
            status_code=422,
            content={
                "error": True,
                "message": "Validation failed",
                "details": format_validation_errors(exc.errors()),
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """
        Translate store failures into a generic 500.

        The repository has already logged the traceback; driver messages are
        not echoed to the caller.
        """
        logger.error(
            "Store error on %s %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": True, "message": STORE_ERROR_MESSAGE},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected exceptions."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": True, "message": INTERNAL_ERROR_MESSAGE},
        )
