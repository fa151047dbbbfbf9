"""
Request middleware.

- **Request ID**: every request/response carries an ``X-Request-ID`` header,
  and the id is published to ``request_id_ctx`` so log lines emitted while
  serving the request can be correlated.
- **Request timing**: logs the wall-clock duration of each request and
  reports it in ``X-Process-Time``.
"""

import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from investment_tracker.core.config import settings
from investment_tracker.core.logging import request_id_ctx

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

# Requests slower than this are logged at WARNING.
SLOW_REQUEST_MS = 500


def procedure_name(path: str) -> Optional[str]:
    """``/rpc/getInvestments`` -> ``getInvestments``; ``None`` outside the RPC prefix."""
    prefix = settings.RPC_PREFIX.rstrip("/") + "/"
    if not path.startswith(prefix):
        return None
    return path[len(prefix):].strip("/") or None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse an upstream ``X-Request-ID`` or generate a UUID4, and echo it back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Log request duration and expose it in ``X-Process-Time``."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[PROCESS_TIME_HEADER] = f"{elapsed_ms:.2f}ms"

        log = logger.warning if elapsed_ms > SLOW_REQUEST_MS else logger.debug
        log(
            "%s %s -> %d in %.2fms%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            " (SLOW)" if elapsed_ms > SLOW_REQUEST_MS else "",
            extra={
                "method": request.method,
                "path": request.url.path,
                "procedure": procedure_name(request.url.path),
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
            },
        )
        return response
