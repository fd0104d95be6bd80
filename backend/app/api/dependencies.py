"""Request-scoped accessors for the services wired in ``create_app``."""

from __future__ import annotations

from fastapi import Request

from app.config import AppSettings
from app.db.database import Database
from app.ingest.orchestrator import IngestionOrchestrator
from app.repositories.deals import DealRepository
from app.services.query import DealQueryEngine


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_repository(request: Request) -> DealRepository:
    return request.app.state.repository


def get_orchestrator(request: Request) -> IngestionOrchestrator:
    return request.app.state.orchestrator


def get_query_engine(request: Request) -> DealQueryEngine:
    return request.app.state.query_engine


__all__ = [
    "get_app_settings",
    "get_database",
    "get_orchestrator",
    "get_query_engine",
    "get_repository",
]
