"""
RPC router aggregation.

Every procedure is mounted on this one router; ``main.py`` mounts it at
``settings.RPC_PREFIX``.
"""

from fastapi import APIRouter

from investment_tracker.api.procedures import health, investments

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(investments.router, tags=["Investments"])
