"""Turn loosely-typed adapter output into canonical :class:`Deal` records."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

from .models import (
    DEFAULT_LENDER_TYPE,
    DEFAULT_MAX_LTV,
    DEFAULT_TERM_YEARS,
    Deal,
    DealType,
)

RATE_QUANTUM = Decimal("0.01")
_ZERO = Decimal("0")

# Exclusive upper bounds of the NUMERIC(5,2) and NUMERIC(10,2) columns
MAX_PERCENTAGE = Decimal("1000")
MAX_AMOUNT = Decimal("100000000")
MAX_TERM_YEARS = 100

_NUMERIC_NOISE = re.compile(r"[^0-9.\-]")
_TRUTHY = {"true", "yes", "y", "1"}

# JSON feeds use the camelCase names of the public API.
_ALIASES = {
    "lenderName": "lender_name",
    "productName": "product_name",
    "interestRate": "interest_rate",
    "dealType": "deal_type",
    "termYears": "term_years",
    "maxLTV": "max_ltv",
    "maxLtv": "max_ltv",
    "arrangementFee": "arrangement_fee",
    "valuationFee": "valuation_fee",
    "legalFees": "legal_fees",
    "freeValuation": "free_valuation",
    "freeLegalWork": "free_legal_work",
    "overpaymentAllowance": "overpayment_allowance",
    "earlyRepaymentCharges": "early_repayment_charges",
    "lenderType": "lender_type",
}


def _canonical_keys(candidate: Mapping[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key, value in candidate.items():
        fields[_ALIASES.get(key, key)] = value
    return fields


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a raw scraped value to ``Decimal``; ``None`` when impossible."""

    if isinstance(value, bool) or _is_missing(value):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        cleaned = _NUMERIC_NOISE.sub("", str(value))
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            return None
    if not result.is_finite():
        return None
    return result


def _bounded(value: Any, limit: Decimal) -> Optional[Decimal]:
    """Like :func:`to_decimal`, but magnitudes of ``limit`` or more count as unparseable."""

    number = to_decimal(value)
    if number is None or abs(number) >= limit:
        return None
    return number


def _money(value: Any) -> Decimal:
    amount = _bounded(value, MAX_AMOUNT)
    if amount is None or amount < _ZERO:
        return _ZERO
    return amount


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if _is_missing(value):
        return False
    return str(value).strip().lower() in _TRUTHY


def _text(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    return " ".join(str(value).split())


def _term_years(value: Any) -> int:
    years = to_decimal(value)
    if years is None or years < 1 or years > MAX_TERM_YEARS:
        return DEFAULT_TERM_YEARS
    return int(years)


def _max_ltv(value: Any) -> Decimal:
    if _is_missing(value):
        return DEFAULT_MAX_LTV
    ltv = _bounded(value, MAX_PERCENTAGE)
    return ltv if ltv is not None and ltv >= _ZERO else _ZERO


def parse_rate(value: Any) -> Optional[Decimal]:
    """Return a positive rate below 1000 quantized to basis points, or ``None``."""

    rate = _bounded(value, MAX_PERCENTAGE)
    if rate is None:
        return None
    rate = rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)
    if rate <= _ZERO or rate >= MAX_PERCENTAGE:
        return None
    return rate


def normalize_candidate(
    candidate: Mapping[str, Any],
    source: str,
    *,
    scraped_at: datetime | None = None,
) -> Optional[Deal]:
    """Convert one candidate record into a :class:`Deal`.

    Candidates without a positive interest rate, a lender name or a product
    name are discarded by returning ``None``.
    """

    fields = _canonical_keys(candidate)
    rate = parse_rate(fields.get("interest_rate"))
    lender = _text(fields.get("lender_name"))
    product = _text(fields.get("product_name"))
    if rate is None or lender is None or product is None:
        return None

    overpayment = _bounded(fields.get("overpayment_allowance"), MAX_PERCENTAGE)
    return Deal(
        lender_name=lender,
        product_name=product,
        interest_rate=rate,
        source=source,
        scraped_at=scraped_at or datetime.now(timezone.utc),
        deal_type=DealType.parse(fields.get("deal_type")),
        term_years=_term_years(fields.get("term_years")),
        max_ltv=_max_ltv(fields.get("max_ltv")),
        arrangement_fee=_money(fields.get("arrangement_fee")),
        valuation_fee=_money(fields.get("valuation_fee")),
        legal_fees=_money(fields.get("legal_fees")),
        cashback=_money(fields.get("cashback")),
        free_valuation=_flag(fields.get("free_valuation")),
        free_legal_work=_flag(fields.get("free_legal_work")),
        overpayment_allowance=overpayment,
        early_repayment_charges=_text(fields.get("early_repayment_charges")),
        lender_type=_text(fields.get("lender_type")) or DEFAULT_LENDER_TYPE,
    )


def normalize_batch(
    candidates: Iterable[Mapping[str, Any]],
    source: str,
    *,
    scraped_at: datetime | None = None,
) -> List[Deal]:
    """Normalize a batch sharing one timestamp, dropping invalid candidates."""

    stamp = scraped_at or datetime.now(timezone.utc)
    deals: List[Deal] = []
    for candidate in candidates:
        deal = normalize_candidate(candidate, source, scraped_at=stamp)
        if deal is not None:
            deals.append(deal)
    return deals


__all__ = [
    "MAX_AMOUNT",
    "MAX_PERCENTAGE",
    "RATE_QUANTUM",
    "normalize_batch",
    "normalize_candidate",
    "parse_rate",
    "to_decimal",
]
