"""Offline adapter serving the bundled sample deal set."""

from __future__ import annotations

import httpx

from mortgage_optimizer.models import AcquisitionParams, CandidateDeal
from mortgage_optimizer.samples import SAMPLE_CANDIDATES

from .base import SourceAdapter


class StaticSampleAdapter(SourceAdapter):
    name = "Sample"

    async def _fetch(self, client: httpx.AsyncClient, params: AcquisitionParams) -> list[CandidateDeal]:
        return [dict(candidate) for candidate in SAMPLE_CANDIDATES]  # type: ignore[misc]


__all__ = ["StaticSampleAdapter"]
