"""Source adapters and the registry used to build them from settings."""

from __future__ import annotations

import logging
from typing import Iterable

import httpx

from .base import SourceAdapter
from .comparison_sites import CompareTheMarketAdapter, MoneySuperMarketAdapter
from .direct_lenders import DirectLendersAdapter
from .sample import StaticSampleAdapter

logger = logging.getLogger(__name__)

ADAPTERS: dict[str, type[SourceAdapter]] = {
    adapter.name.lower(): adapter
    for adapter in (
        MoneySuperMarketAdapter,
        CompareTheMarketAdapter,
        DirectLendersAdapter,
        StaticSampleAdapter,
    )
}


def build_adapter(name: str, *, transport: httpx.AsyncBaseTransport | None = None) -> SourceAdapter:
    try:
        adapter_cls = ADAPTERS[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown deal source: {name}") from exc
    return adapter_cls(transport=transport)


def build_adapters(
    names: Iterable[str],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SourceAdapter]:
    """Instantiate adapters in configured order, skipping unknown names."""

    adapters: list[SourceAdapter] = []
    for name in names:
        try:
            adapters.append(build_adapter(name, transport=transport))
        except ValueError:
            logger.warning("Ignoring unknown deal source %r", name)
    return adapters


__all__ = [
    "ADAPTERS",
    "CompareTheMarketAdapter",
    "DirectLendersAdapter",
    "MoneySuperMarketAdapter",
    "SourceAdapter",
    "StaticSampleAdapter",
    "build_adapter",
    "build_adapters",
]
