"""Adapter reading published rate tables straight from lender websites."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import StringIO

import httpx
import pandas as pd

from mortgage_optimizer.errors import SourceAcquisitionError
from mortgage_optimizer.models import AcquisitionParams, CandidateDeal

from .base import SourceAdapter, plausible_rate

logger = logging.getLogger(__name__)

_RATE_IN_TEXT = re.compile(r"(\d+\.\d+)\s*%")
_PRODUCT_NAME_CHARS = 50


@dataclass(frozen=True)
class LenderPage:
    name: str
    url: str
    lender_type: str = "UK Mainstream"


DEFAULT_LENDER_PAGES = (
    LenderPage("Nationwide", "https://www.nationwide.co.uk/mortgages/mortgage-rates/"),
    LenderPage("Halifax", "https://www.halifax.co.uk/mortgages/mortgage-rates/"),
    LenderPage("Barclays", "https://www.barclays.co.uk/mortgages/mortgage-rates/"),
)


def _row_text(row: pd.Series) -> str:
    cells = [str(value).strip() for value in row.tolist() if not pd.isna(value)]
    return " ".join(cell for cell in cells if cell)


def parse_rate_tables(html: str, lender: LenderPage) -> list[CandidateDeal]:
    """Turn every table row quoting a percentage into a candidate deal."""

    try:
        tables = pd.read_html(StringIO(html))
    except ValueError:
        # read_html raises ValueError when the page holds no <table>
        return []

    deals: list[CandidateDeal] = []
    for table in tables:
        if table.shape[1] < 2:
            continue
        for _, row in table.iterrows():
            text = _row_text(row)
            match = _RATE_IN_TEXT.search(text)
            if not match:
                continue
            rate = float(match.group(1))
            if not plausible_rate(rate):
                continue
            deals.append(
                {
                    "lender_name": lender.name,
                    "product_name": text[:_PRODUCT_NAME_CHARS].strip() or f"{rate}% Mortgage",
                    "interest_rate": rate,
                    "arrangement_fee": 999,
                    "max_ltv": 75,
                    "deal_type": "Fixed",
                    "term_years": 2,
                    "free_valuation": True,
                    "free_legal_work": True,
                    "lender_type": lender.lender_type,
                }
            )
    return deals


class DirectLendersAdapter(SourceAdapter):
    """Scrape each configured lender page in turn within one HTTP session.

    A lender that cannot be reached is skipped; the adapter only fails when
    every lender page failed.
    """

    name = "DirectLenders"

    def __init__(
        self,
        lenders: tuple[LenderPage, ...] = DEFAULT_LENDER_PAGES,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(transport=transport)
        self._lenders = lenders

    async def _fetch(self, client: httpx.AsyncClient, params: AcquisitionParams) -> list[CandidateDeal]:
        deals: list[CandidateDeal] = []
        failures: list[str] = []
        for lender in self._lenders:
            logger.info("Scraping %s rate table", lender.name)
            try:
                html = await self._get_html(client, lender.url)
            except httpx.HTTPError as exc:
                logger.warning("Error scraping %s: %r", lender.name, exc)
                failures.append(lender.name)
                continue
            deals.extend(parse_rate_tables(html, lender))

        if self._lenders and len(failures) == len(self._lenders):
            raise SourceAcquisitionError(self.name, f"all lender pages failed: {', '.join(failures)}")
        logger.info("DirectLenders: found %d deals", len(deals))
        return deals


__all__ = ["DEFAULT_LENDER_PAGES", "DirectLendersAdapter", "LenderPage", "parse_rate_tables"]
