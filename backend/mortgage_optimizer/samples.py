"""Static sample deals served when neither the database nor a live source answers."""
from __future__ import annotations

from datetime import datetime
from typing import List

from .models import CandidateDeal, Deal
from .normalizer import normalize_batch

SAMPLE_SOURCE = "sample"

SAMPLE_CANDIDATES: List[CandidateDeal] = [
    # Challenger banks
    {
        "lender_name": "Atom Bank",
        "product_name": "2 Year Fixed - 75% LTV",
        "interest_rate": "4.29",
        "deal_type": "Fixed",
        "term_years": 2,
        "max_ltv": 75,
        "arrangement_fee": 0,
        "free_valuation": True,
        "free_legal_work": True,
        "lender_type": "UK Challenger Bank",
    },
    {
        "lender_name": "Monzo",
        "product_name": "5 Year Fixed - 60% LTV",
        "interest_rate": "4.15",
        "deal_type": "Fixed",
        "term_years": 5,
        "max_ltv": 60,
        "arrangement_fee": 0,
        "free_valuation": True,
        "free_legal_work": True,
        "lender_type": "UK Challenger Bank",
    },
    # Building societies
    {
        "lender_name": "Nationwide",
        "product_name": "10 Year Fixed - 60% LTV",
        "interest_rate": "4.59",
        "deal_type": "Fixed",
        "term_years": 10,
        "max_ltv": 60,
        "arrangement_fee": 999,
        "free_valuation": True,
        "free_legal_work": True,
        "lender_type": "UK Mainstream",
    },
    {
        "lender_name": "Leeds Building Society",
        "product_name": "2 Year Fixed - 75% LTV",
        "interest_rate": "4.35",
        "deal_type": "Fixed",
        "term_years": 2,
        "max_ltv": 75,
        "arrangement_fee": 999,
        "free_valuation": True,
        "free_legal_work": False,
        "lender_type": "UK Mainstream",
    },
    # Trackers
    {
        "lender_name": "HSBC",
        "product_name": "2 Year Tracker - 60% LTV",
        "interest_rate": "4.79",
        "deal_type": "Tracker",
        "term_years": 2,
        "max_ltv": 60,
        "arrangement_fee": 999,
        "free_valuation": True,
        "free_legal_work": True,
        "overpayment_allowance": 10,
        "lender_type": "UK Mainstream",
    },
    {
        "lender_name": "Barclays",
        "product_name": "Lifetime Tracker - 75% LTV",
        "interest_rate": "5.09",
        "deal_type": "Tracker",
        "term_years": 25,
        "max_ltv": 75,
        "arrangement_fee": 0,
        "free_valuation": True,
        "free_legal_work": True,
        "overpayment_allowance": 100,
        "early_repayment_charges": "None",
        "lender_type": "UK Mainstream",
    },
    {
        "lender_name": "Santander",
        "product_name": "Standard Variable Rate - 85% LTV",
        "interest_rate": "6.75",
        "deal_type": "Variable",
        "term_years": 2,
        "max_ltv": 85,
        "arrangement_fee": 0,
        "valuation_fee": 250,
        "legal_fees": 350,
        "cashback": 500,
        "lender_type": "UK Mainstream",
    },
    # Specialist and offshore
    {
        "lender_name": "HSBC Expat",
        "product_name": "2 Year Fixed - 70% LTV",
        "interest_rate": "4.99",
        "deal_type": "Fixed",
        "term_years": 2,
        "max_ltv": 70,
        "arrangement_fee": 1500,
        "lender_type": "Offshore - Jersey",
    },
    {
        "lender_name": "Butterfield",
        "product_name": "5 Year Fixed - 65% LTV",
        "interest_rate": "5.25",
        "deal_type": "Fixed",
        "term_years": 5,
        "max_ltv": 65,
        "arrangement_fee": 2000,
        "lender_type": "Offshore - Guernsey",
    },
    # Islamic finance
    {
        "lender_name": "Al Rayan Bank",
        "product_name": "Home Purchase Plan - 75% LTV",
        "interest_rate": "4.69",
        "deal_type": "Fixed",
        "term_years": 2,
        "max_ltv": 75,
        "arrangement_fee": 999,
        "free_valuation": True,
        "lender_type": "Islamic Finance",
    },
    # Private banks
    {
        "lender_name": "Coutts",
        "product_name": "Private Mortgage - 70% LTV",
        "interest_rate": "4.85",
        "deal_type": "Fixed",
        "term_years": 5,
        "max_ltv": 70,
        "arrangement_fee": 0,
        "free_valuation": True,
        "free_legal_work": True,
        "lender_type": "Private Bank",
    },
]


def sample_deals(scraped_at: datetime | None = None) -> List[Deal]:
    """Return the sample set as canonical deals."""

    return normalize_batch(SAMPLE_CANDIDATES, SAMPLE_SOURCE, scraped_at=scraped_at)


__all__ = ["SAMPLE_CANDIDATES", "SAMPLE_SOURCE", "sample_deals"]
