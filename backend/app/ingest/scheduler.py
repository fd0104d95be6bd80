"""Periodic trigger for ingestion passes."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class IngestionScheduler:
    """Run ``job`` after ``initial_delay`` seconds and then every ``interval``.

    Passes started by the scheduler run back to back, never concurrently;
    passes triggered elsewhere may still overlap with them.
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[Any]],
        *,
        interval_seconds: float,
        initial_delay_seconds: float = 0.0,
    ) -> None:
        self._job = job
        self._interval = interval_seconds
        self._initial_delay = initial_delay_seconds
        self._task: asyncio.Task[None] | None = None
        self.passes_run = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Start the background loop; returns ``False`` when disabled."""

        if self._interval <= 0:
            logger.info("Scheduled ingestion disabled")
            return False
        if self.running:
            return False
        self._task = asyncio.create_task(self._loop(), name="deal-ingestion-scheduler")
        logger.info(
            "Scheduled ingestion every %.2f hours (first pass in %.0fs)",
            self._interval / 3600,
            self._initial_delay,
        )
        return True

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _loop(self) -> None:
        delay = self._initial_delay
        while True:
            await asyncio.sleep(delay)
            logger.info("Running scheduled ingestion pass")
            try:
                await self._job()
            except Exception:
                logger.exception("Scheduled ingestion pass failed")
            self.passes_run += 1
            delay = self._interval


__all__ = ["IngestionScheduler"]
