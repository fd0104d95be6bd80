"""Ingestion pass: run every source adapter and persist what it finds."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from app.core.telemetry import deals_persisted_counter
from app.providers.base import SourceAdapter
from app.repositories.deals import STATUS_ERROR, STATUS_SUCCESS, DealRepository
from mortgage_optimizer.errors import PersistenceError, SourceAcquisitionError
from mortgage_optimizer.models import AcquisitionParams, IngestionResult
from mortgage_optimizer.normalizer import normalize_batch

logger = logging.getLogger(__name__)


class IngestionOrchestrator:
    """Run all adapters concurrently with per-source failure isolation.

    Each source is acquired, normalized and persisted on its own; a failure
    in one never reaches the others. Every source leaves exactly one audit
    row per pass, and upserts within a source are issued one at a time.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        repository: DealRepository,
        params: AcquisitionParams | None = None,
    ) -> None:
        self._adapters = list(adapters)
        self._repository = repository
        self._params = params or AcquisitionParams()

    @property
    def sources(self) -> list[str]:
        return [adapter.name for adapter in self._adapters]

    async def run_ingestion(self) -> list[IngestionResult]:
        logger.info("Starting ingestion pass for %s", ", ".join(self.sources) or "no sources")
        results = await asyncio.gather(*(self._run_source(adapter) for adapter in self._adapters))
        logger.info(
            "Ingestion pass completed: %s",
            ", ".join(f"{result.source}={result.count}" for result in results),
        )
        return list(results)

    async def _run_source(self, adapter: SourceAdapter) -> IngestionResult:
        source = adapter.name
        try:
            candidates = await adapter.acquire(self._params)
            deals = normalize_batch(candidates, source)
        except SourceAcquisitionError as exc:
            logger.error("%s scraper error: %s", source, exc.message)
            return await self._failed(source, exc.message)
        except Exception as exc:
            logger.exception("%s scraper failed outside its error contract", source)
            return await self._failed(source, repr(exc))

        logger.info("%s: %d candidates, %d valid deals", source, len(candidates), len(deals))
        saved = 0
        for deal in deals:
            try:
                if await self._repository.upsert_deal(deal):
                    saved += 1
            except Exception:
                logger.exception("Error saving %s deal %s / %s", source, deal.lender_name, deal.product_name)

        await self._audit(source, STATUS_SUCCESS, saved)
        deals_persisted_counter.add(saved, {"source": source})
        return IngestionResult(source=source, count=saved)

    async def _failed(self, source: str, message: str) -> IngestionResult:
        await self._audit(source, STATUS_ERROR, 0, message)
        return IngestionResult(source=source, count=0, status=STATUS_ERROR, error=message)

    async def _audit(self, source: str, status: str, count: int, error: str | None = None) -> None:
        try:
            await self._repository.record_ingestion_run(source, status, count, error)
        except PersistenceError:
            logger.exception("Error logging ingestion run for %s", source)


__all__ = ["IngestionOrchestrator"]
