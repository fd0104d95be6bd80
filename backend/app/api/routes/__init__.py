"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .deals import router as deals_router
from .stats import router as stats_router

api_router = APIRouter(prefix="/api")
api_router.include_router(deals_router, prefix="/deals", tags=["deals"])
api_router.include_router(stats_router, prefix="/stats", tags=["stats"])

__all__ = ["api_router"]
