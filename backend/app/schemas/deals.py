"""Pydantic schemas for deal search, ingestion and stats responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from mortgage_optimizer.models import DealStats, EnrichedDeal, IngestionResult


def _float(value) -> float | None:
    return float(value) if value is not None else None


class DealSchema(BaseModel):
    lender_name: str = Field(..., examples=["Atom Bank"])
    product_name: str = Field(..., examples=["2 Year Fixed - 75% LTV"])
    interest_rate: float = Field(..., examples=[4.29])
    deal_type: str = Field(..., examples=["Fixed"])
    term_years: int
    max_ltv: float
    arrangement_fee: float
    valuation_fee: float
    legal_fees: float
    cashback: float
    free_valuation: bool
    free_legal_work: bool
    overpayment_allowance: float | None = None
    early_repayment_charges: str | None = None
    lender_type: str
    source: str
    scraped_at: datetime

    monthly_payment: float
    net_fees: float
    total_cost_2_years: float
    total_cost_5_years: float
    monthly_savings: float | None = None
    break_even_months: int | None = None

    @classmethod
    def from_enriched(cls, item: EnrichedDeal) -> "DealSchema":
        deal, metrics = item.deal, item.metrics
        return cls(
            lender_name=deal.lender_name,
            product_name=deal.product_name,
            interest_rate=float(deal.interest_rate),
            deal_type=deal.deal_type.value,
            term_years=deal.term_years,
            max_ltv=float(deal.max_ltv),
            arrangement_fee=float(deal.arrangement_fee),
            valuation_fee=float(deal.valuation_fee),
            legal_fees=float(deal.legal_fees),
            cashback=float(deal.cashback),
            free_valuation=deal.free_valuation,
            free_legal_work=deal.free_legal_work,
            overpayment_allowance=_float(deal.overpayment_allowance),
            early_repayment_charges=deal.early_repayment_charges,
            lender_type=deal.lender_type,
            source=deal.source,
            scraped_at=deal.scraped_at,
            monthly_payment=float(metrics.monthly_payment),
            net_fees=float(metrics.net_fees),
            total_cost_2_years=float(metrics.total_cost_2_years),
            total_cost_5_years=float(metrics.total_cost_5_years),
            monthly_savings=_float(metrics.monthly_savings),
            break_even_months=metrics.break_even_months,
        )


class IngestionResultSchema(BaseModel):
    source: str
    count: int
    status: str
    error: str | None = None

    @classmethod
    def from_result(cls, result: IngestionResult) -> "IngestionResultSchema":
        return cls(source=result.source, count=result.count, status=result.status, error=result.error)


class ScrapeResponse(BaseModel):
    status: str = "completed"
    results: list[IngestionResultSchema]
    timestamp: datetime


class StatsResponse(BaseModel):
    total_deals: int
    average_rate: float | None = None
    lowest_rate: float | None = None
    last_successful_run: datetime | None = None
    counts_by_source: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_stats(cls, stats: DealStats) -> "StatsResponse":
        return cls(
            total_deals=stats.total_deals,
            average_rate=_float(stats.average_rate),
            lowest_rate=_float(stats.lowest_rate),
            last_successful_run=stats.last_successful_run,
            counts_by_source=dict(stats.counts_by_source),
        )


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    database: str


__all__ = [
    "DealSchema",
    "HealthResponse",
    "IngestionResultSchema",
    "ScrapeResponse",
    "StatsResponse",
]
