"""OpenTelemetry wiring and the pipeline's own instruments."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import AppSettings

logger = logging.getLogger(__name__)

_EXPORT_INTERVAL_MS = 15000
_installed = False

# Bound to the global meter provider proxy: no-ops until setup_telemetry runs.
_meter = metrics.get_meter("mortgage_optimizer.pipeline")
deals_persisted_counter = _meter.create_counter(
    "deals.persisted",
    unit="1",
    description="Deals upserted per source during ingestion passes",
)
fallback_counter = _meter.create_counter(
    "deals.query.fallback",
    unit="1",
    description="Deal searches answered by a step other than the database",
)


def _exporter_options(settings: AppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def _install_providers(settings: AppSettings) -> tuple[TracerProvider, MeterProvider]:
    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "mortgage-optimizer",
        }
    )
    options = _exporter_options(settings)

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**options)))
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(OTLPMetricExporter(**options), export_interval_millis=_EXPORT_INTERVAL_MS)
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)

    log_provider = LoggerProvider(resource=resource)
    log_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**options)))
    set_logger_provider(log_provider)
    return tracer_provider, meter_provider


def setup_telemetry(app: FastAPI, settings: AppSettings, engine: AsyncEngine | None = None) -> bool:
    """Export traces, metrics and logs over OTLP when enabled.

    Instruments the FastAPI app, every httpx client the source adapters open
    and, when given, the database engine. Returns ``True`` only for the call
    that actually installed instrumentation.
    """

    global _installed  # noqa: PLW0603

    if _installed:
        return False
    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled; set TELEMETRY_ENABLED=true to export OTLP data")
        return False

    tracer_provider, meter_provider = _install_providers(settings)
    LoggingInstrumentor().instrument(set_logging_format=False)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider, meter_provider=meter_provider)
    HTTPXClientInstrumentor().instrument(tracer_provider=tracer_provider)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=tracer_provider)

    _installed = True
    logger.info("Telemetry exporting to %s", settings.telemetry_otlp_endpoint or "the default OTLP endpoint")
    return True


__all__ = ["deals_persisted_counter", "fallback_counter", "setup_telemetry"]
