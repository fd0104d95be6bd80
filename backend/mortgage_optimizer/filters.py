"""Deal filter predicates shared by SQL queries and in-memory fallbacks.

Each :class:`Predicate` pairs a deal attribute with a comparison from the
:mod:`operator` module. Applying the operator to a plain :class:`Deal`
attribute yields a ``bool``; applying it to the matching ORM column yields a
SQLAlchemy clause, so a single predicate list serves both query paths.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .models import Deal, DealType

DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class Predicate:
    field: str
    op: Callable[[Any, Any], Any]
    value: Any

    def matches(self, deal: Deal) -> bool:
        return bool(self.op(getattr(deal, self.field), self.value))


def _decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class DealFilters:
    """Optional, AND-composed search constraints.

    ``deal_type`` accepts a member or its case-insensitive name; anything else
    raises ``ValueError``.
    """

    max_rate: Optional[Decimal] = None
    min_ltv: Optional[Decimal] = None
    deal_type: Optional[DealType] = None
    lender_type: Optional[str] = None
    term_years: Optional[int] = None
    free_valuation: bool = False
    free_legal_work: bool = False
    max_arrangement_fee: Optional[Decimal] = None
    has_cashback: bool = False

    def __post_init__(self) -> None:
        if self.deal_type is None:
            return
        deal_type = DealType.lookup(self.deal_type)
        if deal_type is None:
            raise ValueError(f"Unknown deal type: {self.deal_type!r}")
        object.__setattr__(self, "deal_type", deal_type)

    def predicates(self) -> List[Predicate]:
        preds: List[Predicate] = []
        if self.max_rate is not None:
            preds.append(Predicate("interest_rate", operator.le, _decimal(self.max_rate)))
        if self.min_ltv is not None:
            preds.append(Predicate("max_ltv", operator.ge, _decimal(self.min_ltv)))
        if self.deal_type is not None:
            preds.append(Predicate("deal_type", operator.eq, self.deal_type.value))
        if self.lender_type:
            preds.append(Predicate("lender_type", operator.eq, self.lender_type))
        if self.term_years is not None:
            preds.append(Predicate("term_years", operator.eq, int(self.term_years)))
        if self.free_valuation:
            preds.append(Predicate("free_valuation", operator.eq, True))
        if self.free_legal_work:
            preds.append(Predicate("free_legal_work", operator.eq, True))
        if self.max_arrangement_fee is not None:
            preds.append(Predicate("arrangement_fee", operator.le, _decimal(self.max_arrangement_fee)))
        if self.has_cashback:
            preds.append(Predicate("cashback", operator.gt, Decimal("0")))
        return preds

    def matches(self, deal: Deal) -> bool:
        return composite(self.predicates())(deal)


def composite(predicates: Sequence[Predicate]) -> Callable[[Deal], bool]:
    """Fold predicates into one callable; an empty list accepts every deal."""

    def _check(deal: Deal) -> bool:
        return all(predicate.matches(deal) for predicate in predicates)

    return _check


def sort_by_rate(deals: Iterable[Deal]) -> List[Deal]:
    return sorted(deals, key=lambda d: (d.interest_rate, d.lender_name, d.product_name))


def apply_filters(deals: Iterable[Deal], filters: DealFilters, limit: int) -> List[Deal]:
    """In-memory equivalent of the repository query: filter, order, cap."""

    check = composite(filters.predicates())
    return sort_by_rate(deal for deal in deals if check(deal))[: coerce_limit(limit)]


def coerce_limit(limit: Any, default: int = DEFAULT_LIMIT) -> int:
    """Return a positive integer limit, falling back to ``default``."""

    if isinstance(limit, bool):
        return default
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


__all__ = [
    "DEFAULT_LIMIT",
    "DealFilters",
    "Predicate",
    "apply_filters",
    "coerce_limit",
    "composite",
    "sort_by_rate",
]
