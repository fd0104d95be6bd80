"""Source adapter contract shared by every deal provider."""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx
from bs4 import BeautifulSoup, Tag

from mortgage_optimizer.errors import SourceAcquisitionError
from mortgage_optimizer.models import AcquisitionParams, CandidateDeal

logger = logging.getLogger(__name__)

# Scraped rates outside this open interval are markup noise, not offers.
MIN_PLAUSIBLE_RATE = 0.0
MAX_PLAUSIBLE_RATE = 15.0

_NUMBER = re.compile(r"[^0-9.]")


class SourceAdapter(ABC):
    """Retrieve candidate deals from one external origin.

    Every acquisition opens its own HTTP client and closes it before
    returning, whatever the outcome. Failures of any kind surface as
    :class:`SourceAcquisitionError` tagged with :attr:`name`.
    """

    name: str = "unknown"

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def acquire(self, params: AcquisitionParams) -> list[CandidateDeal]:
        timeout = params.timeout_seconds
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(timeout),
                headers={"User-Agent": params.user_agent},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                return await asyncio.wait_for(self._fetch(client, params), timeout=timeout)
        except SourceAcquisitionError:
            raise
        except asyncio.TimeoutError as exc:
            raise SourceAcquisitionError(self.name, f"acquisition timed out after {timeout:g}s") from exc
        except httpx.HTTPStatusError as exc:
            raise SourceAcquisitionError(
                self.name, f"{exc.request.url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceAcquisitionError(self.name, f"request failed: {exc!r}") from exc
        except Exception as exc:
            raise SourceAcquisitionError(self.name, f"unexpected failure: {exc!r}") from exc

    async def _get_html(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(url)
        response.raise_for_status()
        return response.text

    @abstractmethod
    async def _fetch(self, client: httpx.AsyncClient, params: AcquisitionParams) -> list[CandidateDeal]:
        """Return raw candidates using ``client``; may raise anything."""


def parse_number(text: str | None) -> float | None:
    if not text:
        return None
    cleaned = _NUMBER.sub("", text)
    try:
        return float(cleaned)
    except ValueError:
        return None


def plausible_rate(rate: float | None) -> bool:
    return rate is not None and MIN_PLAUSIBLE_RATE < rate < MAX_PLAUSIBLE_RATE


@dataclass(frozen=True)
class CardLayout:
    """CSS selectors locating a comparison site's result cards and fields."""

    card: str
    rate: str
    lender: str
    product: str
    fee: str | None = None
    ltv: str | None = None
    defaults: dict[str, Any] = field(default_factory=dict)


def _first_text(card: Tag, selector: str | None) -> str | None:
    if not selector:
        return None
    element = card.select_one(selector)
    if element is None:
        return None
    text = element.get_text(" ", strip=True)
    return text or None


def parse_result_cards(html: str, layout: CardLayout) -> list[CandidateDeal]:
    """Extract one candidate per result card; unreadable cards are skipped."""

    soup = BeautifulSoup(html, "html.parser")
    results: list[CandidateDeal] = []
    for card in soup.select(layout.card):
        rate = parse_number(_first_text(card, layout.rate))
        if not plausible_rate(rate):
            continue
        candidate: CandidateDeal = {
            **layout.defaults,
            "lender_name": _first_text(card, layout.lender) or "Unknown Lender",
            "product_name": _first_text(card, layout.product) or f"{rate}% Mortgage",
            "interest_rate": rate,
        }
        fee = parse_number(_first_text(card, layout.fee))
        if fee is not None:
            candidate["arrangement_fee"] = fee
        ltv = parse_number(_first_text(card, layout.ltv))
        if ltv:
            candidate["max_ltv"] = ltv
        results.append(candidate)
    return results


__all__ = [
    "CardLayout",
    "SourceAdapter",
    "parse_number",
    "parse_result_cards",
    "plausible_rate",
]
