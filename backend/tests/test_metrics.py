"""Metrics calculator tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from mortgage_optimizer.metrics import (
    calculate_metrics,
    monthly_payment,
    net_fees,
    savings_and_break_even,
)


def _reference_payment(rate: float, principal: float, years: int) -> float:
    monthly_rate = rate / 100 / 12
    n = years * 12
    growth = (1 + monthly_rate) ** n
    return principal * monthly_rate * growth / (growth - 1)


def test_payment_matches_amortization_formula_to_the_cent():
    payment = monthly_payment(Decimal("4.19"), Decimal("85819.31"), 15)

    assert payment.as_tuple().exponent == -2
    assert payment == Decimal("643.00")
    assert float(payment) == pytest.approx(_reference_payment(4.19, 85819.31, 15), abs=0.006)
    assert monthly_payment(Decimal("4.19"), Decimal("85819.31"), 15) == payment


def test_zero_rate_divides_principal_evenly():
    assert monthly_payment(Decimal("0"), Decimal("1200"), 1) == Decimal("100.00")


def test_non_positive_term_yields_zero_payment():
    assert monthly_payment(Decimal("4.5"), Decimal("100000"), 0) == Decimal("0.00")


def test_net_fees_subtract_cashback(make_deal):
    deal = make_deal(arrangement_fee=999, valuation_fee=250, legal_fees=300, cashback=1800)

    assert net_fees(deal) == Decimal("-251.00")


def test_break_even_rounds_up():
    savings, months = savings_and_break_even(Decimal("700"), Decimal("650"), Decimal("999"))

    assert savings == Decimal("50.00")
    assert months == 20


@pytest.mark.parametrize(
    ("baseline", "payment", "fees"),
    [
        (Decimal("600"), Decimal("650"), Decimal("999")),
        (Decimal("650"), Decimal("650"), Decimal("999")),
        (Decimal("700"), Decimal("650"), Decimal("0")),
        (Decimal("700"), Decimal("650"), Decimal("-100")),
    ],
)
def test_no_break_even_without_savings_or_fees(baseline, payment, fees):
    _, months = savings_and_break_even(baseline, payment, fees)

    assert months is None


def test_calculate_metrics_without_baseline(make_deal):
    deal = make_deal(interest_rate="4.19", arrangement_fee=999)
    metrics = calculate_metrics(deal, Decimal("85819.31"), 15)

    assert metrics.net_fees == Decimal("999.00")
    assert metrics.total_cost_2_years == metrics.monthly_payment * 24 + Decimal("999")
    assert metrics.total_cost_5_years == metrics.monthly_payment * 60 + Decimal("999")
    assert metrics.total_cost_5_years >= metrics.total_cost_2_years
    assert metrics.monthly_savings is None
    assert metrics.break_even_months is None


def test_calculate_metrics_with_baseline(make_deal):
    deal = make_deal(interest_rate="4.19", arrangement_fee=999)
    metrics = calculate_metrics(deal, Decimal("85819.31"), 15, Decimal("700"))

    expected_savings = Decimal("700") - metrics.monthly_payment
    assert metrics.monthly_savings == expected_savings
    assert metrics.monthly_savings > 0
    assert metrics.break_even_months is not None
    assert metrics.break_even_months * metrics.monthly_savings >= Decimal("999")
    assert (metrics.break_even_months - 1) * metrics.monthly_savings < Decimal("999")


def test_huge_amounts_still_round_to_the_cent(make_deal):
    deal = make_deal(arrangement_fee="1" * 30)

    metrics = calculate_metrics(deal, Decimal("85819.31"), 15, Decimal("700"))

    for amount in (metrics.net_fees, metrics.total_cost_2_years, metrics.total_cost_5_years):
        assert amount.is_finite()
        assert amount.as_tuple().exponent == -2
    assert metrics.net_fees > Decimal("1e29")
    assert metrics.total_cost_5_years >= metrics.total_cost_2_years
    assert metrics.break_even_months is not None


def test_absurd_rate_and_term_do_not_raise():
    rate = Decimal("1" * 30)

    payment = monthly_payment(rate, Decimal("100000"), 100000)

    assert payment.is_finite()
    assert payment > 0
    assert payment.as_tuple().exponent == -2
