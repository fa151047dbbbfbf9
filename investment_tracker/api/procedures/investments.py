"""
Investment procedures.

- POST  /createInvestment    body: InvestmentCreate  -> Investment
- GET   /getInvestments                              -> [Investment]
- GET   /getInvestmentById   ?input={"id": …}        -> Investment | null
- POST  /updateInvestment    body: InvestmentUpdate  -> Investment | null
- POST  /deleteInvestment    body: InvestmentDelete  -> bool
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from investment_tracker.api.inputs import query_input
from investment_tracker.db.session import get_db
from investment_tracker.models.investment import Investment
from investment_tracker.repositories.investment_repo import InvestmentRepository
from investment_tracker.schemas.common import ErrorResponse, ValidationErrorResponse
from investment_tracker.schemas.investment import (
    InvestmentCreate,
    InvestmentDelete,
    InvestmentLookup,
    InvestmentRead,
    InvestmentUpdate,
)
from investment_tracker.services.investment_service import InvestmentService

router = APIRouter()

_ERRORS = {
    422: {"model": ValidationErrorResponse, "description": "Input failed validation"},
    500: {"model": ErrorResponse, "description": "Store failure"},
}


# ── Dependency injection ──


def _get_investment_service(db: AsyncSession = Depends(get_db)) -> InvestmentService:
    """Build an InvestmentService wired to the current request's DB session."""
    return InvestmentService(InvestmentRepository(Investment, db))


# ── Procedures ──


@router.post(
    "/createInvestment",
    response_model=InvestmentRead,
    summary="Record a new investment",
    description="The ticker symbol is stored upper-case; the price is rounded to cents.",
    responses=_ERRORS,
)
async def create_investment(
    payload: InvestmentCreate,
    service: InvestmentService = Depends(_get_investment_service),
) -> InvestmentRead:
    return await service.create_investment(payload)


@router.get(
    "/getInvestments",
    response_model=List[InvestmentRead],
    summary="List all investments",
    description="Every investment, most recently created first.",
    responses={500: _ERRORS[500]},
)
async def get_investments(
    service: InvestmentService = Depends(_get_investment_service),
) -> List[InvestmentRead]:
    return await service.list_investments()


@router.get(
    "/getInvestmentById",
    response_model=Optional[InvestmentRead],
    summary="Fetch one investment",
    description="Returns ``null`` when no investment has the given id.",
    responses=_ERRORS,
)
async def get_investment_by_id(
    lookup: InvestmentLookup = Depends(query_input(InvestmentLookup)),
    service: InvestmentService = Depends(_get_investment_service),
) -> Optional[InvestmentRead]:
    return await service.get_investment(lookup.id)


@router.post(
    "/updateInvestment",
    response_model=Optional[InvestmentRead],
    summary="Update an investment",
    description=(
        "Only the fields present in the body are changed.  Returns ``null`` "
        "when no investment has the given id."
    ),
    responses=_ERRORS,
)
async def update_investment(
    payload: InvestmentUpdate,
    service: InvestmentService = Depends(_get_investment_service),
) -> Optional[InvestmentRead]:
    return await service.update_investment(payload)


@router.post(
    "/deleteInvestment",
    response_model=bool,
    summary="Delete an investment",
    description="Returns ``true`` if an investment was deleted, ``false`` if none matched.",
    responses=_ERRORS,
)
async def delete_investment(
    payload: InvestmentDelete,
    service: InvestmentService = Depends(_get_investment_service),
) -> bool:
    return await service.delete_investment(payload)
