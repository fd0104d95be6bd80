"""Normalizer tests."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from mortgage_optimizer.models import DealType
from mortgage_optimizer.normalizer import normalize_batch, normalize_candidate, to_decimal

STAMP = datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_defaults_are_applied_to_sparse_candidate():
    deal = normalize_candidate(
        {"lender_name": "Halifax", "product_name": "2 Year Fixed", "interest_rate": 4.5},
        "DirectLenders",
        scraped_at=STAMP,
    )

    assert deal is not None
    assert deal.deal_type is DealType.FIXED
    assert deal.term_years == 2
    assert deal.max_ltv == Decimal("75")
    assert deal.arrangement_fee == deal.valuation_fee == deal.legal_fees == deal.cashback == Decimal("0")
    assert deal.free_valuation is False
    assert deal.free_legal_work is False
    assert deal.overpayment_allowance is None
    assert deal.lender_type == "UK Mainstream"
    assert deal.source == "DirectLenders"
    assert deal.scraped_at == STAMP


def test_scraped_strings_are_coerced():
    deal = normalize_candidate(
        {
            "lenderName": "  Nationwide ",
            "productName": "5 Year Fixed",
            "interestRate": "4.189%",
            "dealType": "tracker",
            "termYears": "5",
            "maxLTV": "60%",
            "arrangementFee": "£1,499",
            "cashback": "£250",
            "freeValuation": "yes",
            "freeLegalWork": True,
            "overpaymentAllowance": "10%",
        },
        "MoneySuperMarket",
    )

    assert deal is not None
    assert deal.lender_name == "Nationwide"
    assert deal.interest_rate == Decimal("4.19")
    assert deal.deal_type is DealType.TRACKER
    assert deal.term_years == 5
    assert deal.max_ltv == Decimal("60")
    assert deal.arrangement_fee == Decimal("1499")
    assert deal.cashback == Decimal("250")
    assert deal.free_valuation is True
    assert deal.free_legal_work is True
    assert deal.overpayment_allowance == Decimal("10")


def test_unparseable_numbers_default_to_zero():
    deal = normalize_candidate(
        {
            "lender_name": "HSBC",
            "product_name": "Tracker",
            "interest_rate": "4.79",
            "arrangement_fee": "call us",
            "max_ltv": "n/a",
            "term_years": "lifetime",
            "deal_type": "Offset",
        },
        "CompareTheMarket",
    )

    assert deal is not None
    assert deal.arrangement_fee == Decimal("0")
    assert deal.max_ltv == Decimal("0")
    assert deal.term_years == 2
    assert deal.deal_type is DealType.FIXED


def test_candidates_without_usable_rate_are_discarded():
    base = {"lender_name": "Monzo", "product_name": "5 Year Fixed"}

    assert normalize_candidate(base, "s") is None
    assert normalize_candidate({**base, "interest_rate": "TBC"}, "s") is None
    assert normalize_candidate({**base, "interest_rate": 0}, "s") is None
    assert normalize_candidate({**base, "interest_rate": "-1.5"}, "s") is None
    assert normalize_candidate({"product_name": "x", "interest_rate": 4.1}, "s") is None


def test_batch_drops_invalid_and_shares_timestamp():
    deals = normalize_batch(
        [
            {"lender_name": "A", "product_name": "P1", "interest_rate": 4.1},
            {"lender_name": "B", "product_name": "P2"},
            {"lender_name": "C", "product_name": "P3", "interest_rate": "3.99"},
        ],
        "Sample",
    )

    assert [deal.lender_name for deal in deals] == ["A", "C"]
    assert deals[0].scraped_at == deals[1].scraped_at


def test_to_decimal_rejects_booleans_and_blanks():
    assert to_decimal(True) is None
    assert to_decimal("   ") is None
    assert to_decimal(None) is None
    assert to_decimal(3) == Decimal("3")


def test_oversized_rate_is_discarded_not_raised():
    base = {"lender_name": "A", "product_name": "P"}

    assert normalize_candidate({**base, "interest_rate": "1" * 30}, "s") is None
    assert normalize_candidate({**base, "interest_rate": "1000"}, "s") is None
    assert normalize_candidate({**base, "interest_rate": "999.999"}, "s") is None
    assert normalize_candidate({**base, "interest_rate": "999.99"}, "s").interest_rate == Decimal("999.99")


def test_oversized_amounts_fall_back_to_defaults():
    deal = normalize_candidate(
        {
            "lender_name": "A",
            "product_name": "P",
            "interest_rate": "4.5",
            "arrangement_fee": "1" * 30,
            "cashback": "£100,000,000",
            "max_ltv": "1" * 30,
            "term_years": "1" * 40,
            "overpayment_allowance": "1" * 30,
        },
        "s",
    )

    assert deal is not None
    assert deal.arrangement_fee == Decimal("0")
    assert deal.cashback == Decimal("0")
    assert deal.max_ltv == Decimal("0")
    assert deal.term_years == 2
    assert deal.overpayment_allowance is None


def test_one_oversized_candidate_does_not_spoil_the_batch():
    deals = normalize_batch(
        [
            {"lender_name": "A", "product_name": "P1", "interest_rate": "1" * 30},
            {"lender_name": "B", "product_name": "P2", "interest_rate": "4.1", "arrangement_fee": "9" * 40},
        ],
        "Sample",
    )

    assert [(d.lender_name, d.arrangement_fee) for d in deals] == [("B", Decimal("0"))]
