"""
Watchlist analysis

Looks up a ticker in the watchlist store and reuses the stored analysis
while it is younger than the freshness window (24h). Otherwise it pulls a
fresh quote, asks the AI collaborator for commentary, merges both into a
WatchlistItem and persists it.

AI failures never fail the request: the item is stored with placeholder
commentary and the live market fields. Quote failures do fail the ticker
(TickerNotFoundError, network errors) and surface as per-ticker errors in
the batch result.
"""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel, Field, field_validator

from app.core.config import get_settings
from app.models import AIAnalysis, TickerData, WatchlistItem
from app.services.utils import clean_tickers, normalize_ticker, utcnow
from app.services.watchlist_store import WatchlistStore

logger = structlog.get_logger()

FetchQuote = Callable[[str], Awaitable[TickerData]]
Analyze = Callable[[str, TickerData], Awaitable[AIAnalysis]]

AI_UNAVAILABLE = "AI analysis unavailable - check API key credits"
AI_UNAVAILABLE_EVALUATION = (
    "AI analysis could not be generated. Financial data shown above is from live market data."
)


class AnalyzeRequest(BaseModel):
    """Body of POST /watchlist/analyze. Batch size is capped by WATCHLIST_MAX_BATCH."""

    tickers: list[str] = Field(min_length=1)

    @field_validator("tickers")
    @classmethod
    def check_batch_size(cls, tickers: list[str]) -> list[str]:
        limit = get_settings().watchlist_max_batch
        if len(tickers) > limit:
            raise ValueError(f"At most {limit} tickers per request")
        return tickers


class TickerError(BaseModel):
    ticker: str
    error: str


class AnalyzeResponse(BaseModel):
    results: list[WatchlistItem] = Field(default_factory=list)
    errors: list[TickerError] = Field(default_factory=list)


def placeholder_analysis() -> AIAnalysis:
    """Commentary stored when the AI collaborator fails."""
    return AIAnalysis(
        risks=[AI_UNAVAILABLE] * 3,
        strengths=[AI_UNAVAILABLE] * 3,
        evaluation=AI_UNAVAILABLE_EVALUATION,
    )


def is_fresh(item: WatchlistItem, now: datetime, hours: Optional[int] = None) -> bool:
    """True while the item's analysis is younger than the freshness window."""
    if hours is None:
        hours = get_settings().watchlist_freshness_hours
    analyzed_at = item.analyzed_at
    if analyzed_at.tzinfo is None:
        analyzed_at = analyzed_at.replace(tzinfo=timezone.utc)
    return now - analyzed_at < timedelta(hours=hours)


def build_item(ticker: str, data: TickerData, analysis: AIAnalysis, now: datetime) -> WatchlistItem:
    """
    Merge quote data and AI output. Non-zero AI estimates win over the
    quote's numbers; ROE and performance always come from the quote.
    """
    return WatchlistItem(
        ticker=ticker,
        company_name=data.company_name,
        description=data.description,
        sector=data.sector,
        industry=data.industry,
        market_cap=data.market_cap,
        price=data.price,
        revenue=analysis.revenue or data.revenue,
        net_income=analysis.net_income or data.net_income,
        eps=analysis.eps or data.eps,
        pe_ratio=analysis.pe_ratio or data.pe_ratio,
        pb_ratio=analysis.pb_ratio or data.pb_ratio,
        ev_ebitda=analysis.ev_ebitda or data.ev_to_ebitda,
        roe=data.return_on_equity,
        ytd_change=data.ytd_change,
        one_year_change=data.one_year_change,
        risks=list(analysis.risks),
        strengths=list(analysis.strengths),
        evaluation=analysis.evaluation,
        analyzed_at=now,
        created_at=now,
    )


async def get_or_refresh(
    ticker: str,
    store: WatchlistStore,
    fetch_quote: FetchQuote,
    analyze: Analyze,
    now: Optional[datetime] = None,
) -> WatchlistItem:
    """
    Return a fresh analysis for one ticker.

    A stored item younger than the freshness window is returned as is,
    without calling either collaborator. Errors from fetch_quote propagate.
    """
    ticker = normalize_ticker(ticker)
    now = now or utcnow()

    cached = await store.get_item(ticker)
    if cached is not None and is_fresh(cached, now):
        logger.debug("watchlist.cache_hit", ticker=ticker)
        return cached

    data = await fetch_quote(ticker)

    try:
        analysis = await analyze(ticker, data)
    except Exception as e:
        logger.warning("watchlist.analyze.ai_failed", ticker=ticker, error=str(e))
        analysis = placeholder_analysis()

    item = build_item(ticker, data, analysis, now)
    await store.upsert_item(item)
    logger.info("watchlist.analyze.stored", ticker=ticker, malformed=analysis.malformed)
    return item


async def analyze_tickers(
    tickers: list[str],
    store: WatchlistStore,
    fetch_quote: FetchQuote,
    analyze: Analyze,
    now: Optional[datetime] = None,
) -> AnalyzeResponse:
    """
    Analyze a batch of tickers one after another.

    Tickers are cleaned first (trimmed, upper-cased, 1 to 10 characters).
    A failing ticker becomes an entry in `errors`; the rest of the batch
    still runs.
    """
    response = AnalyzeResponse()

    for ticker in clean_tickers(tickers):
        try:
            item = await get_or_refresh(ticker, store, fetch_quote, analyze, now=now)
            response.results.append(item)
        except Exception as e:
            logger.warning("watchlist.analyze.ticker_failed", ticker=ticker, error=str(e))
            response.errors.append(TickerError(ticker=ticker, error=str(e) or type(e).__name__))

    logger.info(
        "watchlist.analyze.done",
        requested=len(tickers),
        analyzed=len(response.results),
        errors=len(response.errors),
    )
    return response
