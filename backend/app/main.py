"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Sequence

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.dependencies import get_database
from app.api.routes import api_router
from app.config import AppSettings, get_settings
from app.core.logging import setup_logging
from app.core.telemetry import setup_telemetry
from app.db.database import Database
from app.ingest.orchestrator import IngestionOrchestrator
from app.ingest.scheduler import IngestionScheduler
from app.providers import SourceAdapter, build_adapter, build_adapters
from app.repositories.deals import DealRepository
from app.schemas import HealthResponse
from app.services.query import DealQueryEngine
from mortgage_optimizer.models import AcquisitionParams

logger = logging.getLogger(__name__)


def _live_adapter(settings: AppSettings, adapters: Sequence[SourceAdapter]) -> SourceAdapter | None:
    wanted = settings.live_fallback_source.strip().lower()
    if not wanted:
        return None
    for adapter in adapters:
        if adapter.name.lower() == wanted:
            return adapter
    try:
        return build_adapter(wanted)
    except ValueError:
        logger.warning("Live fallback source %r is not a known adapter", settings.live_fallback_source)
        return None


def create_app(
    settings: AppSettings | None = None,
    *,
    database: Database | None = None,
    adapters: Sequence[SourceAdapter] | None = None,
    live_adapter: SourceAdapter | None = None,
) -> FastAPI:
    """Wire the database, adapters and services into one application."""

    settings = settings or get_settings()
    database = database or Database(settings.database_url)
    adapters = list(adapters) if adapters is not None else build_adapters(settings.ingest_sources)
    if live_adapter is None:
        live_adapter = _live_adapter(settings, adapters)

    params = AcquisitionParams(
        timeout_seconds=settings.scraper_timeout_seconds,
        user_agent=settings.scraper_user_agent,
    )
    repository = DealRepository(database)
    orchestrator = IngestionOrchestrator(adapters, repository, params)
    query_engine = DealQueryEngine(
        repository,
        live_adapter,
        principal=settings.default_principal,
        term_years=settings.default_term_years,
        default_baseline=settings.default_baseline_monthly,
        params=params,
    )
    scheduler = IngestionScheduler(
        orchestrator.run_ingestion,
        interval_seconds=settings.ingest_interval_hours * 3600,
        initial_delay_seconds=settings.ingest_initial_delay_seconds,
    )

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting %s with settings %s", settings.app_name, settings.dict_for_logging())
        await database.create_all()
        scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            await database.dispose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=_lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.repository = repository
    app.state.orchestrator = orchestrator
    app.state.query_engine = query_engine
    app.state.scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Deal-Source"],
    )
    app.include_router(api_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(db: Database = Depends(get_database)) -> HealthResponse:
        """Return service readiness metadata."""

        connected = await db.ping()
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            database="connected" if connected else "error",
        )

    setup_telemetry(app, settings, engine=database.engine)
    return app


def build_default_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    return create_app(settings)


__all__ = ["create_app", "build_default_app"]
