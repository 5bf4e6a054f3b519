"""
BDC Screener - Database Schema

Tables for tracked BDCs and their portfolio holdings.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Date,
    DateTime,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# Holding provenance
SOURCE_SEC_FILING = "sec_filing"
SOURCE_REPRESENTATIVE = "representative"


class Bdc(Base):
    """A tracked Business Development Company and its latest metrics."""

    __tablename__ = "bdcs"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )
    cik: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)  # SEC Central Index Key
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    ticker: Mapped[Optional[str]] = mapped_column(String(20))

    # Financial metrics (all nullable: None means unknown, not zero)
    dividend_yield: Mapped[Optional[Decimal]] = mapped_column(Numeric)  # annual, percent
    dividend_growth_3yr: Mapped[Optional[Decimal]] = mapped_column(Numeric)  # CAGR, percent
    nav_per_share: Mapped[Optional[Decimal]] = mapped_column(Numeric)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric)
    price_to_nav: Mapped[Optional[Decimal]] = mapped_column(Numeric)
    non_accrual_pct: Mapped[Optional[Decimal]] = mapped_column(Numeric)  # percent of fair value
    total_assets: Mapped[Optional[Decimal]] = mapped_column(Numeric)
    debt_to_equity: Mapped[Optional[Decimal]] = mapped_column(Numeric)  # ratio, 1.2 = 1.2x
    net_investment_income_yield: Mapped[Optional[Decimal]] = mapped_column(Numeric)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("idx_bdcs_ticker", "ticker"),
    )

    def __repr__(self):
        return f"<Bdc(cik='{self.cik}', ticker='{self.ticker}')>"


class Holding(Base):
    """One portfolio company line from a BDC's schedule of investments."""

    __tablename__ = "holdings"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )
    # Plain column, not a foreign key: holdings are replaced wholesale per BDC
    bdc_cik: Mapped[str] = mapped_column(String(20), nullable=False)
    period_date: Mapped[date] = mapped_column(Date, nullable=False)  # report period, not import date
    company_name: Mapped[str] = mapped_column(Text, nullable=False)
    industry_raw: Mapped[Optional[str]] = mapped_column(Text)
    industry_sector: Mapped[Optional[str]] = mapped_column(String(50))
    fair_value: Mapped[Optional[Decimal]] = mapped_column(Numeric)

    source: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SOURCE_SEC_FILING, server_default=SOURCE_SEC_FILING
    )  # sec_filing, representative

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("idx_holdings_bdc_cik", "bdc_cik"),
        Index("idx_holdings_bdc_period", "bdc_cik", "period_date"),
        Index("idx_holdings_sector", "industry_sector"),
    )
