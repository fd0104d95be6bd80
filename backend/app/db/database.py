"""Database engine ownership for the mortgage optimizer service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base shared by the deal tables."""


class Database:
    """Configure an async SQLAlchemy engine and session factory.

    One instance is created per application (or per test) and handed to the
    repository explicitly; nothing here is a module-level singleton.
    """

    def __init__(self, url: str, **engine_options: Any):
        self._url = url
        self._engine: AsyncEngine = create_async_engine(self._url, future=True, echo=False, **engine_options)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False, class_=AsyncSession)

    @property
    def url(self) -> str:
        return self._url

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    async def create_all(self) -> None:
        """Create the deal and audit tables when they do not exist yet."""

        # registers DealRecord and ScrapeLog on Base.metadata
        import app.models  # noqa: F401  # pylint: disable=unused-import,import-outside-toplevel

        try:
            async with self._engine.begin() as connection:
                await connection.run_sync(Base.metadata.create_all)
        except SQLAlchemyError:
            logger.exception("Failed to initialise database schema")
            raise

    async def ping(self) -> bool:
        """Return ``True`` when a trivial query succeeds."""

        try:
            async with self._engine.connect() as connection:
                await connection.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    async def dispose(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session


__all__ = ["Base", "Database"]
