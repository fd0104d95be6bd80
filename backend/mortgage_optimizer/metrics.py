"""Amortization and cost metrics computed at read time."""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, Overflow, localcontext
from typing import Optional

from .models import Deal, DerivedMetrics

CENT = Decimal("0.01")
HORIZONS_YEARS = (2, 5)
_ZERO = Decimal("0")


def to_cents(amount: Decimal) -> Decimal:
    """Round half-up at the cent, whatever the magnitude of ``amount``."""

    if not amount.is_finite():
        return amount
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def monthly_payment(rate: Decimal, principal: Decimal, years: int) -> Decimal:
    """Standard amortizing-loan payment for an annual percentage ``rate``."""

    periods = int(years) * 12
    if periods <= 0:
        return to_cents(_ZERO)
    monthly_rate = Decimal(rate) / Decimal(100) / Decimal(12)
    if monthly_rate <= _ZERO:
        return to_cents(Decimal(principal) / periods)
    try:
        growth = (1 + monthly_rate) ** periods
        payment = Decimal(principal) * monthly_rate * growth / (growth - 1)
    except Overflow:
        # growth / (growth - 1) tends to 1 for absurd rates or terms
        payment = Decimal(principal) * monthly_rate
    return to_cents(payment)


def net_fees(deal: Deal) -> Decimal:
    """Upfront fees less cashback; negative when cashback exceeds fees."""

    return to_cents(deal.arrangement_fee + deal.valuation_fee + deal.legal_fees - deal.cashback)


def total_cost(payment: Decimal, fees: Decimal, horizon_years: int) -> Decimal:
    return to_cents(payment * 12 * horizon_years + fees)


def savings_and_break_even(
    baseline: Decimal,
    payment: Decimal,
    fees: Decimal,
) -> tuple[Decimal, Optional[int]]:
    """Return monthly savings against ``baseline`` and the break-even month.

    Break-even only exists when the deal saves money and there are fees to
    recoup; otherwise it is ``None``.
    """

    savings = to_cents(Decimal(baseline) - payment)
    if savings > _ZERO and fees > _ZERO:
        return savings, math.ceil(fees / savings)
    return savings, None


def calculate_metrics(
    deal: Deal,
    principal: Decimal,
    years: int,
    baseline_monthly: Decimal | None = None,
) -> DerivedMetrics:
    payment = monthly_payment(deal.interest_rate, principal, years)
    fees = net_fees(deal)
    two_year, five_year = (total_cost(payment, fees, horizon) for horizon in HORIZONS_YEARS)

    savings: Optional[Decimal] = None
    break_even: Optional[int] = None
    if baseline_monthly is not None:
        savings, break_even = savings_and_break_even(baseline_monthly, payment, fees)

    return DerivedMetrics(
        monthly_payment=payment,
        net_fees=fees,
        total_cost_2_years=two_year,
        total_cost_5_years=five_year,
        monthly_savings=savings,
        break_even_months=break_even,
    )


__all__ = [
    "CENT",
    "HORIZONS_YEARS",
    "calculate_metrics",
    "monthly_payment",
    "net_fees",
    "savings_and_break_even",
    "total_cost",
    "to_cents",
]
