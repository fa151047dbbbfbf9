"""Liveness procedure."""

from datetime import datetime, timezone

from fastapi import APIRouter

from investment_tracker.schemas.common import HealthResponse

router = APIRouter()


@router.get(
    "/healthcheck",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Always reports ``ok`` with the current server time.  Does not touch the store.",
)
async def healthcheck() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))
