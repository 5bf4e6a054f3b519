"""
BDC Price Refresh

Pulls price, dividend yield, NAV per share and debt-to-equity from Yahoo
for every BDC with a ticker and writes them back. Run from the cron
endpoint (GET /v1/cron/refresh-prices) or scripts/refresh_prices.py.

Rules:
    - only fields Yahoo returned are written (plus updated_at)
    - price_to_nav is recomputed when both price and a positive NAV arrive
    - non_accrual_pct is never touched (Yahoo does not report it)
    - a BDC with nothing from Yahoo is skipped, not cleared
    - one failing ticker never stops the run
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.services import bdc_store
from app.services.quotes import BdcQuote, fetch_bdc_quote
from app.services.utils import utcnow

logger = structlog.get_logger()

FetchBdcQuote = Callable[[str], Awaitable[BdcQuote]]

STATUS_UPDATED = "updated"
STATUS_SKIPPED = "skipped"
STATUS_ERROR = "error"

NO_DATA_MESSAGE = "No data from Yahoo"


class TickerRefreshResult(BaseModel):
    ticker: str
    status: str  # updated, skipped, error
    message: Optional[str] = None


class RefreshSummary(BaseModel):
    total: int = 0
    updated: int = 0
    errors: int = 0
    skipped: int = 0


class RefreshReport(BaseModel):
    success: bool = True
    summary: RefreshSummary = Field(default_factory=RefreshSummary)
    results: list[TickerRefreshResult] = Field(default_factory=list)
    timestamp: str = ""


def build_update_fields(quote: BdcQuote) -> dict[str, Any]:
    """
    Columns to write for one quote, without updated_at.

    Empty when Yahoo returned nothing usable.
    """
    fields: dict[str, Any] = {
        name: value
        for name, value in (
            ("price", quote.price),
            ("dividend_yield", quote.dividend_yield),
            ("nav_per_share", quote.nav_per_share),
            ("debt_to_equity", quote.debt_to_equity),
        )
        if value is not None
    }

    if quote.price is not None and quote.nav_per_share is not None and quote.nav_per_share > 0:
        fields["price_to_nav"] = round(quote.price / quote.nav_per_share, 2)

    return fields


async def refresh_prices(
    session: AsyncSession,
    fetch_quote: FetchBdcQuote = fetch_bdc_quote,
    delay: Optional[float] = None,
) -> RefreshReport:
    """
    Refresh market fields for every BDC with a ticker, one at a time.

    `delay` seconds are slept after each quote call (default from settings).
    """
    if delay is None:
        delay = get_settings().quote_request_delay

    # Plain tuples: a rollback expires ORM rows
    targets = [(bdc.cik, bdc.ticker) for bdc in await bdc_store.fetch_bdcs_with_tickers(session)]
    report = RefreshReport(summary=RefreshSummary(total=len(targets)))
    logger.info("refresh_prices.start", count=len(targets))

    for cik, ticker in targets:
        if not ticker:
            continue

        try:
            quote = await fetch_quote(ticker)
            fields = build_update_fields(quote)
            if not fields:
                result = TickerRefreshResult(ticker=ticker, status=STATUS_SKIPPED, message=NO_DATA_MESSAGE)
            else:
                await bdc_store.update_bdc_fields(session, cik, bdc_store.touch(fields))
                result = TickerRefreshResult(ticker=ticker, status=STATUS_UPDATED)
        except Exception as e:
            await session.rollback()
            logger.warning("refresh_prices.ticker_failed", ticker=ticker, error=str(e))
            result = TickerRefreshResult(
                ticker=ticker, status=STATUS_ERROR, message=str(e) or type(e).__name__
            )

        report.results.append(result)

        if delay:
            await asyncio.sleep(delay)

    report.summary.updated = sum(1 for r in report.results if r.status == STATUS_UPDATED)
    report.summary.errors = sum(1 for r in report.results if r.status == STATUS_ERROR)
    report.summary.skipped = len(report.results) - report.summary.updated - report.summary.errors
    report.timestamp = utcnow().isoformat()

    logger.info("refresh_prices.done", **report.summary.model_dump())
    return report
