"""Persisted mortgage deals and the ingestion audit log."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base
from mortgage_optimizer.models import DEFAULT_LENDER_TYPE, Deal, DealType


class DealRecord(Base):
    __tablename__ = "deals"
    __table_args__ = (
        UniqueConstraint("lender_name", "product_name", "interest_rate", name="uq_deals_lender_product_rate"),
        Index("ix_deals_interest_rate", "interest_rate"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    lender_name: Mapped[str] = mapped_column(String(255))
    product_name: Mapped[str] = mapped_column(String(255))
    interest_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    deal_type: Mapped[str] = mapped_column(String(50), default=DealType.FIXED.value)
    term_years: Mapped[int] = mapped_column(Integer, default=2)
    max_ltv: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("75"))
    arrangement_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    valuation_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    legal_fees: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    cashback: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    free_valuation: Mapped[bool] = mapped_column(Boolean, default=False)
    free_legal_work: Mapped[bool] = mapped_column(Boolean, default=False)
    overpayment_allowance: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    early_repayment_charges: Mapped[str | None] = mapped_column(Text, nullable=True)
    lender_type: Mapped[str] = mapped_column(String(100), default=DEFAULT_LENDER_TYPE)
    source: Mapped[str] = mapped_column(String(100))
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    @classmethod
    def values_from(cls, deal: Deal) -> dict:
        """Column values for an insert of ``deal``."""

        return {
            "lender_name": deal.lender_name,
            "product_name": deal.product_name,
            "interest_rate": deal.interest_rate,
            "deal_type": deal.deal_type.value,
            "term_years": deal.term_years,
            "max_ltv": deal.max_ltv,
            "arrangement_fee": deal.arrangement_fee,
            "valuation_fee": deal.valuation_fee,
            "legal_fees": deal.legal_fees,
            "cashback": deal.cashback,
            "free_valuation": deal.free_valuation,
            "free_legal_work": deal.free_legal_work,
            "overpayment_allowance": deal.overpayment_allowance,
            "early_repayment_charges": deal.early_repayment_charges,
            "lender_type": deal.lender_type,
            "source": deal.source,
            "scraped_at": deal.scraped_at,
        }

    def to_domain(self) -> Deal:
        return Deal(
            lender_name=self.lender_name,
            product_name=self.product_name,
            interest_rate=Decimal(self.interest_rate),
            source=self.source,
            scraped_at=self.scraped_at,
            deal_type=DealType.parse(self.deal_type),
            term_years=self.term_years,
            max_ltv=Decimal(self.max_ltv),
            arrangement_fee=Decimal(self.arrangement_fee),
            valuation_fee=Decimal(self.valuation_fee),
            legal_fees=Decimal(self.legal_fees),
            cashback=Decimal(self.cashback),
            free_valuation=bool(self.free_valuation),
            free_legal_work=bool(self.free_legal_work),
            overpayment_allowance=(
                Decimal(self.overpayment_allowance) if self.overpayment_allowance is not None else None
            ),
            early_repayment_charges=self.early_repayment_charges,
            lender_type=self.lender_type,
        )


class ScrapeLog(Base):
    """Append-only audit row, one per source per ingestion pass."""

    __tablename__ = "scrape_logs"
    __table_args__ = (Index("ix_scrape_logs_status_scraped_at", "status", "scraped_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    source: Mapped[str] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(50))
    deals_found: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


__all__ = ["DealRecord", "ScrapeLog"]
