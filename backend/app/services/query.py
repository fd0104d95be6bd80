"""Deal search with the database, live-source and sample fallback cascade."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, List

from app.core.telemetry import fallback_counter
from app.providers.base import SourceAdapter
from app.repositories.deals import DealRepository
from mortgage_optimizer.errors import QueryError, SourceAcquisitionError
from mortgage_optimizer.filters import DEFAULT_LIMIT, DealFilters, apply_filters, coerce_limit
from mortgage_optimizer.metrics import calculate_metrics
from mortgage_optimizer.models import AcquisitionParams, Deal, EnrichedDeal
from mortgage_optimizer.normalizer import normalize_batch
from mortgage_optimizer.samples import sample_deals

logger = logging.getLogger(__name__)

ORIGIN_DATABASE = "database"
ORIGIN_LIVE = "live"
ORIGIN_SAMPLE = "sample"


@dataclass(frozen=True)
class QueryResult:
    deals: List[EnrichedDeal]
    origin: str


class DealQueryEngine:
    """Answer deal searches, degrading step by step until something answers.

    1. persisted deals matching the filters;
    2. a live acquisition from ``live_adapter`` filtered in memory;
    3. the bundled sample set filtered in memory.

    An empty database and a failing database both move on to step 2. They are
    logged at different levels and :attr:`QueryResult.origin` reports which
    step produced the data.
    """

    def __init__(
        self,
        repository: DealRepository,
        live_adapter: SourceAdapter | None,
        *,
        principal: Decimal,
        term_years: int,
        default_baseline: Decimal | None = None,
        params: AcquisitionParams | None = None,
        sample_loader: Callable[[], List[Deal]] = sample_deals,
    ) -> None:
        self._repository = repository
        self._live_adapter = live_adapter
        self._principal = principal
        self._term_years = term_years
        self._default_baseline = default_baseline
        self._params = params or AcquisitionParams()
        self._sample_loader = sample_loader

    async def search(
        self,
        filters: DealFilters | None = None,
        limit: Any = DEFAULT_LIMIT,
        baseline_monthly: Decimal | None = None,
    ) -> QueryResult:
        filters = filters or DealFilters()
        limit = coerce_limit(limit)
        deals, origin = await self._cascade(filters, limit)
        baseline = baseline_monthly if baseline_monthly is not None else self._default_baseline
        enriched = [
            EnrichedDeal(deal, calculate_metrics(deal, self._principal, self._term_years, baseline))
            for deal in deals
        ]
        return QueryResult(deals=enriched, origin=origin)

    async def _cascade(self, filters: DealFilters, limit: int) -> tuple[List[Deal], str]:
        try:
            deals = await self._repository.query_deals(filters, limit)
        except QueryError:
            logger.warning("Deal query failed, falling back to live data", exc_info=True)
        else:
            if deals:
                return deals, ORIGIN_DATABASE
            logger.info("No persisted deals match the filters, falling back to live data")

        live = await self._live_deals(filters, limit)
        if live:
            fallback_counter.add(1, {"origin": ORIGIN_LIVE})
            return live, ORIGIN_LIVE

        logger.warning("Live fallback returned nothing, serving sample deals")
        fallback_counter.add(1, {"origin": ORIGIN_SAMPLE})
        return apply_filters(self._sample_loader(), filters, limit), ORIGIN_SAMPLE

    async def _live_deals(self, filters: DealFilters, limit: int) -> List[Deal]:
        if self._live_adapter is None:
            return []
        try:
            candidates = await self._live_adapter.acquire(self._params)
        except SourceAcquisitionError as exc:
            logger.warning("Live fallback from %s failed: %s", exc.source, exc.message)
            return []
        try:
            deals = normalize_batch(candidates, self._live_adapter.name)
            return apply_filters(deals, filters, limit)
        except Exception:
            logger.warning("Discarding unusable live deals from %s", self._live_adapter.name, exc_info=True)
            return []


__all__ = ["DealQueryEngine", "QueryResult", "ORIGIN_DATABASE", "ORIGIN_LIVE", "ORIGIN_SAMPLE"]
