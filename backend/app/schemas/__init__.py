"""Pydantic schema exports."""

from .deals import DealSchema, HealthResponse, IngestionResultSchema, ScrapeResponse, StatsResponse

__all__ = [
    "DealSchema",
    "HealthResponse",
    "IngestionResultSchema",
    "ScrapeResponse",
    "StatsResponse",
]
