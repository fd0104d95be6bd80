"""Aggregate statistics over the persisted deal set."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_repository
from app.repositories.deals import DealRepository
from app.schemas import StatsResponse
from mortgage_optimizer.errors import QueryError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=StatsResponse)
async def get_stats(repository: DealRepository = Depends(get_repository)) -> StatsResponse:
    try:
        stats = await repository.get_stats()
    except QueryError as exc:
        logger.error("Error getting stats: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to get stats: {exc}",
        ) from exc
    return StatsResponse.from_stats(stats)


__all__ = ["router"]
