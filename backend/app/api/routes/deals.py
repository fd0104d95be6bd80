"""Deal search, latest listing and manual ingestion endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_app_settings, get_orchestrator, get_query_engine
from app.config import AppSettings
from app.ingest.orchestrator import IngestionOrchestrator
from app.schemas import DealSchema, IngestionResultSchema, ScrapeResponse
from app.services.query import DealQueryEngine, QueryResult
from mortgage_optimizer.filters import DealFilters, coerce_limit
from mortgage_optimizer.models import DealType

router = APIRouter()
logger = logging.getLogger(__name__)

DEAL_SOURCE_HEADER = "X-Deal-Source"


async def _respond(
    engine: DealQueryEngine,
    response: Response,
    filters: DealFilters,
    limit: int,
    baseline_monthly: float | None,
) -> list[DealSchema]:
    baseline = Decimal(str(baseline_monthly)) if baseline_monthly is not None else None
    try:
        result: QueryResult = await engine.search(filters, limit=limit, baseline_monthly=baseline)
    except Exception as exc:
        logger.exception("Deal search failed on every fallback")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch deals: {exc}",
        ) from exc
    response.headers[DEAL_SOURCE_HEADER] = result.origin
    logger.info("Returning %d deals from %s", len(result.deals), result.origin)
    return [DealSchema.from_enriched(item) for item in result.deals]


@router.get("/latest", response_model=list[DealSchema])
async def latest_deals(
    response: Response,
    limit: str | None = Query(default=None, description="Maximum number of deals"),
    baseline_monthly: float | None = Query(default=None, gt=0, description="Current monthly payment"),
    engine: DealQueryEngine = Depends(get_query_engine),
    settings: AppSettings = Depends(get_app_settings),
) -> list[DealSchema]:
    """Cheapest deals regardless of filters."""

    return await _respond(
        engine,
        response,
        DealFilters(),
        coerce_limit(limit, default=settings.latest_deals_limit),
        baseline_monthly,
    )


@router.get("/search", response_model=list[DealSchema])
async def search_deals(
    response: Response,
    max_rate: float | None = Query(default=None, gt=0),
    min_ltv: float | None = Query(default=None, ge=0),
    deal_type: DealType | None = Query(default=None),
    lender_type: str | None = Query(default=None),
    term_years: int | None = Query(default=None, gt=0),
    free_valuation: bool = Query(default=False),
    free_legal_work: bool = Query(default=False),
    max_arrangement_fee: float | None = Query(default=None, ge=0),
    has_cashback: bool = Query(default=False),
    limit: str | None = Query(default=None, description="Maximum number of deals"),
    baseline_monthly: float | None = Query(default=None, gt=0, description="Current monthly payment"),
    engine: DealQueryEngine = Depends(get_query_engine),
    settings: AppSettings = Depends(get_app_settings),
) -> list[DealSchema]:
    """Deals matching every supplied filter, cheapest rate first."""

    filters = DealFilters(
        max_rate=Decimal(str(max_rate)) if max_rate is not None else None,
        min_ltv=Decimal(str(min_ltv)) if min_ltv is not None else None,
        deal_type=deal_type,
        lender_type=lender_type or None,
        term_years=term_years,
        free_valuation=free_valuation,
        free_legal_work=free_legal_work,
        max_arrangement_fee=Decimal(str(max_arrangement_fee)) if max_arrangement_fee is not None else None,
        has_cashback=has_cashback,
    )
    return await _respond(
        engine,
        response,
        filters,
        coerce_limit(limit, default=settings.default_query_limit),
        baseline_monthly,
    )


@router.post("/scrape", response_model=ScrapeResponse)
async def trigger_scrape(
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> ScrapeResponse:
    """Run one ingestion pass synchronously and report per-source counts."""

    results = await orchestrator.run_ingestion()
    return ScrapeResponse(
        status="completed",
        results=[IngestionResultSchema.from_result(result) for result in results],
        timestamp=datetime.now(timezone.utc),
    )


__all__ = ["router", "DEAL_SOURCE_HEADER"]
