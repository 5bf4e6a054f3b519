"""
API routes for the BDC Screener

Core endpoints:
- GET /v1/bdcs
- GET /v1/bdcs/{cik}
- GET /v1/sectors
- GET /v1/cron/refresh-prices
- GET /v1/ping
- GET /v1/health
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import cache_ping
from app.core.config import get_settings
from app.core.database import get_db
from app.models import Bdc, SOURCE_REPRESENTATIVE, SOURCE_SEC_FILING
from app.services import bdc_store
from app.services.portfolio import (
    METRIC_FIELDS,
    aggregate_holdings,
    build_screener_rows,
    get_field,
    latest_period_holdings,
    resolve_sector,
    summarize_sectors,
)
from app.services.price_refresh import FetchBdcQuote, refresh_prices
from app.services.quotes import fetch_bdc_quote
from app.services.screener import (
    ALL_SECTORS,
    DEFAULT_SORT_KEY,
    SORT_KEYS,
    filter_by_sector,
    latest_update,
    screener_summary,
    sort_rows,
)
from app.services.sector_classifier import SECTORS, get_sector_color
from app.services.utils import utcnow

router = APIRouter()

SORT_ORDERS = ("asc", "desc")


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_bdc_quote_fetcher() -> FetchBdcQuote:
    """Quote source for the price refresh."""
    return fetch_bdc_quote


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

async def get_bdc_or_404(db: AsyncSession, cik: str) -> Bdc:
    """Get BDC by CIK or raise 404."""
    bdc = await bdc_store.fetch_bdc(db, cik)
    if not bdc:
        raise HTTPException(status_code=404, detail=f"BDC {cik} not found")
    return bdc


def bdc_header(bdc: Any) -> dict:
    """Identity and scalar metrics of a BDC, metrics as floats or None."""
    header = {
        "cik": get_field(bdc, "cik"),
        "name": get_field(bdc, "name"),
        "ticker": get_field(bdc, "ticker"),
    }
    for name in METRIC_FIELDS:
        value = get_field(bdc, name)
        header[name] = float(value) if value is not None else None
    updated_at = get_field(bdc, "updated_at")
    header["updated_at"] = updated_at.isoformat() if updated_at else None
    return header


def holding_row(holding: Any) -> dict:
    period = get_field(holding, "period_date")
    fair_value = get_field(holding, "fair_value")
    return {
        "company_name": get_field(holding, "company_name"),
        "industry_raw": get_field(holding, "industry_raw"),
        "industry_sector": resolve_sector(holding),
        "fair_value": float(fair_value) if fair_value is not None else None,
        "period_date": period.isoformat() if hasattr(period, "isoformat") else period,
        "source": get_field(holding, "source", SOURCE_SEC_FILING),
    }


# =============================================================================
# HEALTH CHECK
# =============================================================================


@router.get("/ping", tags=["System"])
async def ping():
    """Simple ping endpoint for load balancer health checks.

    Does not check database - just confirms the app is running.
    Use /health for full health status including database.
    """
    return {"status": "ok"}


@router.get("/health", tags=["System"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Full health check endpoint with database and cache verification."""
    checks = {}

    try:
        await db.execute(select(func.now()))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"

    settings = get_settings()
    if not settings.redis_url:
        checks["cache"] = "not configured"
    else:
        success, message = await cache_ping()
        checks["cache"] = "healthy" if success else f"failed: {message}"

    checks["ai"] = "configured" if settings.has_gemini else "not configured"
    checks["watchlist_backend"] = settings.watchlist_backend

    # Only database is required for healthy status
    healthy = checks["database"] == "healthy"

    return {
        "status": "healthy" if healthy else "degraded",
        "checks": checks,
        "version": settings.api_version,
        "timestamp": utcnow().isoformat(),
    }


# =============================================================================
# SCREENER
# =============================================================================


@router.get("/bdcs", tags=["BDCs"])
async def list_bdcs(
    sort: str = Query(DEFAULT_SORT_KEY, description="Metric, sector, name or total_fair_value"),
    order: str = Query("desc", description="asc or desc"),
    sector: str = Query(ALL_SECTORS, description="Only BDCs with exposure to this sector"),
    db: AsyncSession = Depends(get_db),
):
    """
    Screener rows for every BDC with holdings or metrics.

    Each row carries the scalar metrics and the percentage of fair value in
    each sector for the BDC's latest reporting period.
    """
    if sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail=f"Invalid sort key: {sort}")
    if order not in SORT_ORDERS:
        raise HTTPException(status_code=400, detail=f"Invalid order: {order}")
    if sector != ALL_SECTORS and sector not in SECTORS:
        raise HTTPException(status_code=400, detail=f"Invalid sector: {sector}")

    bdcs = await bdc_store.fetch_all_bdcs(db)
    holdings_by_cik = await bdc_store.fetch_holdings_by_cik(db)

    rows = build_screener_rows(bdcs, holdings_by_cik)
    summary = screener_summary(rows)
    rows = filter_by_sector(rows, sector)
    rows = sort_rows(rows, sort, descending=order == "desc")

    last_updated = latest_update(bdcs)

    return {
        "data": [row.model_dump() for row in rows],
        "meta": {
            "total": len(rows),
            "sort": sort,
            "order": order,
            "sector": sector,
            "summary": summary,
            "last_updated": last_updated.isoformat() if last_updated else None,
        },
    }


@router.get("/bdcs/{cik}", tags=["BDCs"])
async def get_bdc_detail(cik: str, db: AsyncSession = Depends(get_db)):
    """BDC metrics, sector breakdown and holdings of the latest period."""
    bdc = await get_bdc_or_404(db, cik)
    holdings = await bdc_store.fetch_holdings_for_bdc(db, cik)

    exposure = aggregate_holdings(holdings)
    period, latest = latest_period_holdings(holdings)
    latest_rows = sorted(
        (holding_row(h) for h in latest),
        key=lambda row: row["fair_value"] or 0,
        reverse=True,
    )
    sources = {row["source"] for row in latest_rows}

    return {
        "data": {
            "bdc": bdc_header(bdc),
            "period_date": period or None,
            "total_fair_value": exposure.total_fair_value,
            "sector_exposures": exposure.sector_exposures,
            "sectors": [
                {
                    "sector": s.sector,
                    "value": s.value,
                    "percentage": round(s.percentage, 2),
                    "count": s.count,
                    "color": get_sector_color(s.sector),
                }
                for s in summarize_sectors(holdings)
            ],
            "holdings": latest_rows,
            "is_representative": SOURCE_REPRESENTATIVE in sources,
        },
    }


# =============================================================================
# SECTORS (Utility endpoint)
# =============================================================================


@router.get("/sectors", tags=["Metadata"])
async def list_sectors():
    """The fixed sector taxonomy with display colours."""
    return {
        "data": [{"sector": sector, "color": get_sector_color(sector)} for sector in SECTORS],
    }


# =============================================================================
# CRON
# =============================================================================


@router.get("/cron/refresh-prices", tags=["System"])
async def cron_refresh_prices(
    db: AsyncSession = Depends(get_db),
    fetch_quote: FetchBdcQuote = Depends(get_bdc_quote_fetcher),
):
    """
    Refresh price, dividend yield, NAV and leverage for every BDC with a
    ticker. Returns a per-ticker status and a summary.
    """
    report = await refresh_prices(db, fetch_quote)
    return report.model_dump()
