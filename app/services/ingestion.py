"""
BDC Ingestion

Loads the tracked BDC universe, its holdings and its financial metrics into
the database. Driven by scripts/import_sec_data.py and
scripts/import_financial_metrics.py.

Holdings come from the latest 10-K/10-Q on EDGAR, parsed heuristically.
When fewer than MIN_SEC_SUCCESSES BDCs parse, representative holdings are
generated from REPRESENTATIVE_ALLOCATIONS instead; those rows carry
source="representative" so they are never mistaken for filed data.

Randomness (representative values, default metrics) always comes from a
random.Random passed in by the caller, so a fixed seed reproduces a run.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import SOURCE_REPRESENTATIVE, SOURCE_SEC_FILING
from app.services import bdc_store
from app.services.reference_data import (
    REPRESENTATIVE_ALLOCATIONS,
    SECTOR_COMPANY_NAMES,
    TRACKED_BDCS,
    Allocation,
    BdcReference,
    get_curated_metrics,
)
from app.services.sec_client import SECEdgarClient, parse_filing_for_holdings
from app.services.sector_classifier import OTHER_SECTOR, classify_sector

logger = structlog.get_logger()

MIN_SEC_SUCCESSES = 5
REPRESENTATIVE_PERIOD = "2025-09-30"
DEFAULT_SEED = 42

MIN_COMPANIES_PER_SECTOR = 2
MAX_COMPANIES_PER_SECTOR = 8


@dataclass
class ImportStats:
    """Counters for one holdings import run."""
    bdcs_processed: int = 0
    bdcs_imported: int = 0
    holdings_imported: int = 0
    used_representative: bool = False
    failures: list[dict] = field(default_factory=list)


# =============================================================================
# GENERATORS (pure)
# =============================================================================

def companies_for_sector(percentage: float) -> int:
    """Number of representative holdings for a sector weight: 2 to 8."""
    return max(MIN_COMPANIES_PER_SECTOR, min(MAX_COMPANIES_PER_SECTOR, int(percentage // 3)))


def generate_representative_holdings(
    cik: str,
    allocation: Allocation,
    rng: random.Random,
    period_date: str = REPRESENTATIVE_PERIOD,
) -> list[dict]:
    """
    Synthetic holdings matching a sector allocation.

    Each sector's share of total AUM is split evenly across its companies,
    then each value is scaled by a random factor between 0.7 and 1.3.
    Company names come from the sector's pool with a letter suffix.
    """
    holdings = []
    for sector, percentage in allocation.sectors.items():
        if percentage <= 0:
            continue

        sector_value = allocation.total_aum * percentage / 100
        names = SECTOR_COMPANY_NAMES.get(sector) or SECTOR_COMPANY_NAMES[OTHER_SECTOR]
        count = companies_for_sector(percentage)

        for i in range(count):
            variation = 0.7 + rng.random() * 0.6
            holdings.append({
                "bdc_cik": cik,
                "period_date": period_date,
                "company_name": f"{names[i % len(names)]} {chr(65 + i % 26)}",
                "industry_raw": sector,
                "industry_sector": sector,
                "fair_value": round(sector_value / count * variation),
                "source": SOURCE_REPRESENTATIVE,
            })
    return holdings


def generate_default_metrics(name: str, rng: random.Random) -> dict[str, float]:
    """
    Plausible metrics for a BDC without curated data.

    Venture and growth lenders get a higher yield and non-accrual baseline;
    names with "capital" get a larger balance sheet.
    """
    lowered = (name or "").lower()
    is_venture = any(word in lowered for word in ("venture", "growth", "technology"))
    is_large = "capital" in lowered and "small" not in lowered

    base_yield = 12.5 if is_venture else 10.5
    base_non_accrual = 3.5 if is_venture else 2.0
    base_nav = 12 + rng.random() * 8
    price_to_nav = 0.85 + rng.random() * 0.25

    metrics = {
        "dividend_yield": base_yield + (rng.random() * 3 - 1.5),
        "dividend_growth_3yr": rng.random() * 10 - 3,
        "nav_per_share": base_nav,
        "price": base_nav * price_to_nav,
        "price_to_nav": price_to_nav,
        "non_accrual_pct": base_non_accrual + (rng.random() * 2 - 0.5),
    }
    if is_large:
        metrics["total_assets"] = 1_000_000_000 + rng.random() * 2_000_000_000
    else:
        metrics["total_assets"] = 200_000_000 + rng.random() * 800_000_000
    metrics["debt_to_equity"] = 0.8 + rng.random() * 0.5
    metrics["net_investment_income_yield"] = base_yield + 0.5 + (rng.random() * 2 - 1)
    return metrics


def holdings_from_filing(cik: str, html: str, filing_date: str) -> list[dict]:
    """Parsed filing rows as holding records stamped with the filing date."""
    return [
        {
            "bdc_cik": cik,
            "period_date": filing_date,
            "company_name": parsed.company_name,
            "industry_raw": parsed.industry_raw,
            "industry_sector": classify_sector(parsed.industry_raw),
            "fair_value": parsed.fair_value,
            "source": SOURCE_SEC_FILING,
        }
        for parsed in parse_filing_for_holdings(html)
    ]


# =============================================================================
# DATABASE STEPS
# =============================================================================

async def import_bdcs(session: AsyncSession, bdcs: Iterable[BdcReference] = TRACKED_BDCS) -> int:
    """Upsert the tracked BDC list by CIK."""
    records = [{"cik": bdc.cik, "name": bdc.name, "ticker": bdc.ticker} for bdc in bdcs]
    count = await bdc_store.upsert_bdcs(session, records)
    logger.info("ingestion.bdcs.upserted", count=count)
    return count


async def import_representative_data(
    session: AsyncSession,
    rng: random.Random,
    allocations: Optional[dict[str, Allocation]] = None,
) -> int:
    """Replace holdings of every BDC with an allocation by synthetic ones."""
    allocations = REPRESENTATIVE_ALLOCATIONS if allocations is None else allocations
    total = 0
    for cik, allocation in allocations.items():
        records = generate_representative_holdings(cik, allocation, rng)
        total += await bdc_store.replace_holdings(session, cik, records)
    logger.info("ingestion.representative.done", bdcs=len(allocations), holdings=total)
    return total


async def import_holdings_from_sec(
    session: AsyncSession,
    edgar: SECEdgarClient,
    rng: random.Random,
    bdcs: Iterable[BdcReference] = TRACKED_BDCS,
    allow_fallback: bool = True,
) -> ImportStats:
    """
    Import holdings from each BDC's latest filing.

    A BDC whose lookup, download or parse fails is skipped; its previous
    holdings are left as they were.
    """
    stats = ImportStats()

    for bdc in bdcs:
        stats.bdcs_processed += 1
        try:
            filing = await edgar.get_latest_filing(bdc.cik)
            if filing is None:
                logger.info("ingestion.sec.no_filing", ticker=bdc.ticker)
                continue

            html = await edgar.download_filing(bdc.cik, filing)
            records = holdings_from_filing(bdc.cik, html, filing.filing_date)
            if not records:
                logger.info("ingestion.sec.unparsed", ticker=bdc.ticker, form=filing.form_type)
                continue

            stats.holdings_imported += await bdc_store.replace_holdings(session, bdc.cik, records)
            stats.bdcs_imported += 1
            logger.info(
                "ingestion.sec.imported",
                ticker=bdc.ticker,
                form=filing.form_type,
                filing_date=filing.filing_date,
                holdings=len(records),
            )
        except Exception as e:
            await session.rollback()
            logger.warning("ingestion.sec.failed", ticker=bdc.ticker, error=str(e))
            stats.failures.append({"ticker": bdc.ticker, "error": str(e)})

    if allow_fallback and stats.bdcs_imported < MIN_SEC_SUCCESSES:
        logger.info("ingestion.sec.fallback", imported=stats.bdcs_imported)
        stats.holdings_imported += await import_representative_data(session, rng)
        stats.used_representative = True

    return stats


async def import_financial_metrics(session: AsyncSession, rng: random.Random) -> dict[str, Any]:
    """
    Write curated metrics for known tickers and generated defaults for the
    rest of the BDCs in the database.
    """
    stats = {"updated": 0, "defaults": 0, "errors": 0}

    # Plain tuples: a rollback expires ORM rows
    targets = [(bdc.cik, bdc.ticker, bdc.name) for bdc in await bdc_store.fetch_all_bdcs(session)]

    for cik, ticker, name in targets:
        metrics = get_curated_metrics(ticker)
        is_default = metrics is None
        if is_default:
            metrics = generate_default_metrics(name, rng)

        try:
            await bdc_store.update_bdc_fields(session, cik, bdc_store.touch(metrics))
        except Exception as e:
            await session.rollback()
            logger.warning("ingestion.metrics.failed", ticker=ticker, error=str(e))
            stats["errors"] += 1
            continue

        stats["updated"] += 1
        if is_default:
            stats["defaults"] += 1

    logger.info("ingestion.metrics.done", **stats)
    return stats
