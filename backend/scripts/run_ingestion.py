"""CLI wrapper for one deal ingestion pass."""

from __future__ import annotations

import argparse
import asyncio

from app.config import get_settings
from app.core.logging import setup_logging
from app.db.database import Database
from app.ingest.orchestrator import IngestionOrchestrator
from app.providers import build_adapters
from app.repositories.deals import DealRepository
from mortgage_optimizer.models import AcquisitionParams


async def _run(sources: list[str]) -> int:
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        await database.create_all()
        orchestrator = IngestionOrchestrator(
            build_adapters(sources),
            DealRepository(database),
            AcquisitionParams(
                timeout_seconds=settings.scraper_timeout_seconds,
                user_agent=settings.scraper_user_agent,
            ),
        )
        results = await orchestrator.run_ingestion()
    finally:
        await database.dispose()

    for result in results:
        suffix = f" ({result.error})" if result.error else ""
        print(f"{result.source}: {result.status}, {result.count} deals upserted{suffix}")
    return 0 if any(result.status == "success" for result in results) else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Scrape every configured deal source and upsert the results")
    parser.add_argument(
        "--source",
        action="append",
        dest="sources",
        help="Source to run (repeatable); defaults to INGEST_SOURCES, e.g. MoneySuperMarket,DirectLenders",
    )
    args = parser.parse_args()
    setup_logging(get_settings().log_level)
    raise SystemExit(asyncio.run(_run(args.sources or get_settings().ingest_sources)))


if __name__ == "__main__":
    main()
