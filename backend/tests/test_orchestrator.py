"""Ingestion orchestrator tests."""

from __future__ import annotations

import asyncio
from decimal import Decimal

from sqlalchemy import select

from app.ingest.orchestrator import IngestionOrchestrator
from app.models import DealRecord, ScrapeLog
from app.providers import StaticSampleAdapter
from app.providers.base import SourceAdapter
from app.repositories.deals import DealRepository
from mortgage_optimizer.errors import PersistenceError
from mortgage_optimizer.models import AcquisitionParams
from mortgage_optimizer.samples import sample_deals


class StubAdapter(SourceAdapter):
    def __init__(self, name, candidates=None, error=None):
        super().__init__()
        self.name = name
        self._candidates = candidates or []
        self._error = error

    async def _fetch(self, client, params):
        if self._error is not None:
            raise self._error
        return list(self._candidates)


CANDIDATES = [
    {"lender_name": "Atom Bank", "product_name": "2 Year Fixed", "interest_rate": "4.29"},
    {"lender_name": "Monzo", "product_name": "5 Year Fixed", "interest_rate": "4.15", "term_years": 5},
    {"lender_name": "Broken", "product_name": "No rate"},
]


async def test_failing_source_does_not_block_others(database):
    await database.create_all()
    repository = DealRepository(database)
    orchestrator = IngestionOrchestrator(
        [StubAdapter("A", error=RuntimeError("layout changed")), StubAdapter("B", CANDIDATES)],
        repository,
        AcquisitionParams(timeout_seconds=5),
    )

    results = await orchestrator.run_ingestion()

    assert [(r.source, r.count, r.status) for r in results] == [("A", 0, "error"), ("B", 2, "success")]
    assert "layout changed" in results[0].error
    assert {d.lender_name for d in await repository.query_deals()} == {"Atom Bank", "Monzo"}

    async with database.session() as session:
        logs = (await session.execute(select(ScrapeLog).order_by(ScrapeLog.source))).scalars().all()
    assert [(log.source, log.status, log.deals_found) for log in logs] == [("A", "error", 0), ("B", "success", 2)]
    assert logs[0].error_message
    await database.dispose()


async def test_repeated_passes_do_not_duplicate_deals(database):
    await database.create_all()
    repository = DealRepository(database)
    orchestrator = IngestionOrchestrator([StubAdapter("B", CANDIDATES)], repository)

    await orchestrator.run_ingestion()
    await orchestrator.run_ingestion()

    assert len(await repository.query_deals()) == 2
    await database.dispose()


class FlakyRepository:
    """Fails every other upsert and records audit calls."""

    def __init__(self, audit_error=None):
        self.saved = []
        self.audits = []
        self._audit_error = audit_error
        self._calls = 0

    async def upsert_deal(self, deal):
        self._calls += 1
        if self._calls == 1:
            raise RuntimeError("connection reset")
        if self._calls == 2:
            return False
        self.saved.append(deal)
        return True

    async def record_ingestion_run(self, source, status, count, error=None):
        if self._audit_error is not None:
            raise self._audit_error
        self.audits.append((source, status, count, error))


async def test_record_failures_are_isolated():
    repository = FlakyRepository()
    candidates = CANDIDATES[:2] + [{"lender_name": "HSBC", "product_name": "Tracker", "interest_rate": 4.79}]
    orchestrator = IngestionOrchestrator([StubAdapter("B", candidates)], repository)

    [result] = await orchestrator.run_ingestion()

    assert result.count == 1
    assert result.status == "success"
    assert [deal.lender_name for deal in repository.saved] == ["HSBC"]
    assert repository.audits == [("B", "success", 1, None)]


async def test_audit_failure_does_not_fail_the_pass():
    repository = FlakyRepository(audit_error=PersistenceError("audit table missing"))
    orchestrator = IngestionOrchestrator([StubAdapter("A", error=ValueError("bad page"))], repository)

    [result] = await orchestrator.run_ingestion()

    assert result.status == "error"
    assert result.count == 0


async def test_no_sources_is_an_empty_pass():
    orchestrator = IngestionOrchestrator([], FlakyRepository())

    assert await orchestrator.run_ingestion() == []
    assert orchestrator.sources == []


async def test_oversized_values_only_drop_the_affected_record(database):
    await database.create_all()
    repository = DealRepository(database)
    candidates = [
        {"lender_name": "Atom Bank", "product_name": "2 Year Fixed", "interest_rate": "4.29"},
        {"lender_name": "Typo Bank", "product_name": "2 Year Fixed", "interest_rate": "1" * 30},
        {"lender_name": "Monzo", "product_name": "5 Year Fixed", "interest_rate": "4.15", "arrangement_fee": "1" * 30},
    ]
    orchestrator = IngestionOrchestrator([StubAdapter("B", candidates)], repository)

    [result] = await orchestrator.run_ingestion()

    assert (result.source, result.status, result.count) == ("B", "success", 2)
    stored = {deal.lender_name: deal for deal in await repository.query_deals()}
    assert set(stored) == {"Atom Bank", "Monzo"}
    assert stored["Monzo"].arrangement_fee == Decimal("0")
    await database.dispose()


async def test_concurrent_passes_converge_on_one_row_per_key(database):
    await database.create_all()
    repository = DealRepository(database)
    passes = [IngestionOrchestrator([StaticSampleAdapter()], repository) for _ in range(2)]

    results = await asyncio.gather(*(orchestrator.run_ingestion() for orchestrator in passes))

    assert all(result.status == "success" for batch in results for result in batch)
    expected_keys = {deal.key for deal in sample_deals()}
    async with database.session() as session:
        rows = (await session.execute(select(DealRecord))).scalars().all()
    assert len(rows) == len(expected_keys)
    assert {row.to_domain().key for row in rows} == expected_keys
    await database.dispose()
