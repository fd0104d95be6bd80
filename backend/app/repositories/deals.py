"""Persistence for deals and the ingestion audit log."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from app.db.database import Database
from app.models import DealRecord, ScrapeLog
from mortgage_optimizer.errors import PersistenceError, QueryError
from mortgage_optimizer.filters import DEFAULT_LIMIT, DealFilters, coerce_limit
from mortgage_optimizer.models import Deal, DealStats

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

_KEY_COLUMNS = (DealRecord.lender_name, DealRecord.product_name, DealRecord.interest_rate)
_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def _rate(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class DealRepository:
    """Deal storage backed by an injected :class:`Database`.

    Uniqueness of (lender, product, rate) is enforced by the database and
    upserts rely on its native ``ON CONFLICT`` resolution, so concurrent
    ingestion passes never need application-level locks.
    """

    def __init__(self, database: Database) -> None:
        self._database = database
        try:
            self._insert = _INSERTS[database.dialect]
        except KeyError as exc:
            raise ValueError(f"Unsupported database dialect for upserts: {database.dialect}") from exc

    async def upsert_deal(self, deal: Deal) -> bool:
        """Insert ``deal`` or refresh its fee and timestamp; ``False`` on failure."""

        record = DealRecord.values_from(deal)
        stmt = (
            self._insert(DealRecord)
            .values(**record)
            .on_conflict_do_update(
                index_elements=list(_KEY_COLUMNS),
                set_={
                    "arrangement_fee": record["arrangement_fee"],
                    "scraped_at": record["scraped_at"],
                },
            )
        )
        try:
            async with self._database.session() as session:
                await session.execute(stmt)
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            error = PersistenceError(f"Failed to upsert {deal.lender_name} / {deal.product_name}: {exc}")
            logger.warning("%s", error)
            return False
        return True

    async def record_ingestion_run(
        self,
        source: str,
        status: str,
        count: int,
        error: str | None = None,
    ) -> None:
        """Append one audit row; raises :class:`PersistenceError` on failure."""

        entry = ScrapeLog(
            source=source,
            status=status,
            deals_found=count,
            error_message=error,
            scraped_at=datetime.now(timezone.utc),
        )
        try:
            async with self._database.session() as session:
                session.add(entry)
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceError(f"Failed to record ingestion run for {source}: {exc}") from exc

    async def query_deals(self, filters: DealFilters | None = None, limit: Any = DEFAULT_LIMIT) -> list[Deal]:
        """Deals matching every filter, cheapest rate first."""

        filters = filters or DealFilters()
        clauses = [pred.op(getattr(DealRecord, pred.field), pred.value) for pred in filters.predicates()]
        stmt = select(DealRecord)
        if clauses:
            stmt = stmt.where(*clauses)
        stmt = (
            stmt.order_by(DealRecord.interest_rate.asc(), DealRecord.lender_name, DealRecord.product_name)
            .limit(coerce_limit(limit))
        )
        try:
            async with self._database.session() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except (SQLAlchemyError, OSError) as exc:
            raise QueryError(f"Deal query failed: {exc}") from exc
        return [row.to_domain() for row in rows]

    async def get_stats(self) -> DealStats:
        summary_stmt = select(
            func.count(DealRecord.id),
            func.avg(DealRecord.interest_rate),
            func.min(DealRecord.interest_rate),
        )
        last_run_stmt = select(func.max(ScrapeLog.scraped_at)).where(ScrapeLog.status == STATUS_SUCCESS)
        by_source_stmt = (
            select(DealRecord.source, func.count(DealRecord.id))
            .group_by(DealRecord.source)
            .order_by(DealRecord.source)
        )
        try:
            async with self._database.session() as session:
                total, average, lowest = (await session.execute(summary_stmt)).one()
                last_run = (await session.execute(last_run_stmt)).scalar()
                by_source = (await session.execute(by_source_stmt)).all()
        except (SQLAlchemyError, OSError) as exc:
            raise QueryError(f"Stats query failed: {exc}") from exc

        return DealStats(
            total_deals=int(total or 0),
            average_rate=_rate(average),
            lowest_rate=_rate(lowest),
            last_successful_run=last_run,
            counts_by_source={source: int(count) for source, count in by_source},
        )


__all__ = ["DealRepository", "STATUS_ERROR", "STATUS_SUCCESS"]
