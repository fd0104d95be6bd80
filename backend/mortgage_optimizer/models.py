"""Domain models used by the deal aggregation pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, TypedDict

DEFAULT_TERM_YEARS = 2
DEFAULT_MAX_LTV = Decimal("75")
DEFAULT_LENDER_TYPE = "UK Mainstream"


class DealType(str, Enum):
    FIXED = "Fixed"
    TRACKER = "Tracker"
    VARIABLE = "Variable"

    @classmethod
    def lookup(cls, raw: Any) -> "DealType | None":
        """Case-insensitive match on the member value; ``None`` when unknown."""

        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None

    @classmethod
    def parse(cls, raw: Any) -> "DealType":
        """Return the matching member, falling back to ``Fixed``."""

        return cls.lookup(raw) or cls.FIXED


class CandidateDeal(TypedDict, total=False):
    """Loosely-typed record produced by a source adapter.

    Every key is optional and values may be raw strings scraped from markup.
    Only the normalizer turns these into :class:`Deal` instances.
    """

    lender_name: Any
    product_name: Any
    interest_rate: Any
    deal_type: Any
    term_years: Any
    max_ltv: Any
    arrangement_fee: Any
    valuation_fee: Any
    legal_fees: Any
    cashback: Any
    free_valuation: Any
    free_legal_work: Any
    overpayment_allowance: Any
    early_repayment_charges: Any
    lender_type: Any


@dataclass(frozen=True)
class Deal:
    """One mortgage product offer, keyed by lender, product and rate."""

    lender_name: str
    product_name: str
    interest_rate: Decimal
    source: str
    scraped_at: datetime
    deal_type: DealType = DealType.FIXED
    term_years: int = DEFAULT_TERM_YEARS
    max_ltv: Decimal = DEFAULT_MAX_LTV
    arrangement_fee: Decimal = Decimal("0")
    valuation_fee: Decimal = Decimal("0")
    legal_fees: Decimal = Decimal("0")
    cashback: Decimal = Decimal("0")
    free_valuation: bool = False
    free_legal_work: bool = False
    overpayment_allowance: Optional[Decimal] = None
    early_repayment_charges: Optional[str] = None
    lender_type: str = DEFAULT_LENDER_TYPE

    @property
    def key(self) -> tuple[str, str, Decimal]:
        return (self.lender_name, self.product_name, self.interest_rate)


@dataclass(frozen=True)
class DerivedMetrics:
    """Read-time figures computed from a deal and the caller's parameters."""

    monthly_payment: Decimal
    net_fees: Decimal
    total_cost_2_years: Decimal
    total_cost_5_years: Decimal
    monthly_savings: Optional[Decimal] = None
    break_even_months: Optional[int] = None


@dataclass(frozen=True)
class EnrichedDeal:
    deal: Deal
    metrics: DerivedMetrics


@dataclass(frozen=True)
class AcquisitionParams:
    """Parameters handed to every source adapter on acquisition."""

    timeout_seconds: float = 60.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of one source within an ingestion pass."""

    source: str
    count: int
    status: str = "success"
    error: Optional[str] = None


@dataclass(frozen=True)
class DealStats:
    total_deals: int
    average_rate: Optional[Decimal]
    lowest_rate: Optional[Decimal]
    last_successful_run: Optional[datetime]
    counts_by_source: dict[str, int] = field(default_factory=dict)


__all__ = [
    "AcquisitionParams",
    "CandidateDeal",
    "Deal",
    "DealStats",
    "DealType",
    "DerivedMetrics",
    "EnrichedDeal",
    "IngestionResult",
    "DEFAULT_LENDER_TYPE",
    "DEFAULT_MAX_LTV",
    "DEFAULT_TERM_YEARS",
]
