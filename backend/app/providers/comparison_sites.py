"""Adapters for price-comparison sites that render deals as result cards."""

from __future__ import annotations

import logging

import httpx

from mortgage_optimizer.models import AcquisitionParams, CandidateDeal

from .base import CardLayout, SourceAdapter, parse_result_cards

logger = logging.getLogger(__name__)

_CARD_DEFAULTS = {
    "deal_type": "Fixed",
    "term_years": 2,
    "free_valuation": False,
    "free_legal_work": False,
    "lender_type": "UK Mainstream",
}


class ComparisonSiteAdapter(SourceAdapter):
    """Fetch one results page and read every card matching :attr:`layout`."""

    url: str
    layout: CardLayout

    async def _fetch(self, client: httpx.AsyncClient, params: AcquisitionParams) -> list[CandidateDeal]:
        logger.info("Fetching %s results from %s", self.name, self.url)
        html = await self._get_html(client, self.url)
        deals = parse_result_cards(html, self.layout)
        if not deals:
            logger.info("%s: no result cards found", self.name)
        else:
            logger.info("%s: found %d deals", self.name, len(deals))
        return deals


class MoneySuperMarketAdapter(ComparisonSiteAdapter):
    name = "MoneySuperMarket"
    url = "https://www.moneysupermarket.com/mortgages/remortgage/results/"
    layout = CardLayout(
        card='[data-testid="result-card"], .result-card, .mortgage-result, [class*="ResultCard"]',
        rate='[data-testid="rate"], .rate, [class*="rate"], .interest-rate',
        lender='[data-testid="lender"], .lender-name, [class*="lender"], .provider-name',
        product='[data-testid="product"], .product-name, [class*="product"]',
        fee='[data-testid="fee"], .fee, [class*="fee"]',
        ltv='[data-testid="ltv"], .ltv, [class*="ltv"]',
        defaults=_CARD_DEFAULTS,
    )


class CompareTheMarketAdapter(ComparisonSiteAdapter):
    name = "CompareTheMarket"
    url = "https://www.comparethemarket.com/mortgages/"
    layout = CardLayout(
        card='.result-card, .mortgage-product, [class*="product-card"]',
        rate='.rate, [class*="rate"], .apr',
        lender='.lender, .provider, [class*="lender"]',
        product='.product, .title, [class*="product"]',
        defaults={**_CARD_DEFAULTS, "arrangement_fee": 0, "max_ltv": 75},
    )


__all__ = ["ComparisonSiteAdapter", "CompareTheMarketAdapter", "MoneySuperMarketAdapter"]
