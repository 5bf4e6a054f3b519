"""
Quote Service

Market data for the watchlist and the BDC price refresh:
1. Yahoo Finance via yfinance (price, fundamentals, 1y monthly closes)
2. Financial Modeling Prep profile (company description) - optional,
   only when FMP_API_KEY is set

yfinance calls block, so they run in the default executor.

FMP API Documentation: https://site.financialmodelingprep.com/developer/docs
"""

import asyncio
import math
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
import yfinance as yf
from pydantic import BaseModel

from app.core.config import get_settings
from app.models import TickerData
from app.services.utils import normalize_ticker, utcnow

logger = structlog.get_logger()

FMP_BASE_URL = "https://financialmodelingprep.com/stable"


class TickerNotFoundError(LookupError):
    """Yahoo has no usable price for the ticker."""

    def __init__(self, ticker: str):
        super().__init__(f'Ticker "{ticker}" not found')
        self.ticker = ticker


class BdcQuote(BaseModel):
    """Fields the price refresh writes back to a BDC. None means unknown."""

    price: Optional[float] = None
    dividend_yield: Optional[float] = None  # percent, 9.5 = 9.5%
    nav_per_share: Optional[float] = None
    debt_to_equity: Optional[float] = None  # ratio, 1.2 = 1.2x

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.price, self.dividend_yield, self.nav_per_share, self.debt_to_equity)
        )


# =============================================================================
# PURE HELPERS
# =============================================================================

def _safe_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _pct_change(current: float, base: Optional[float]) -> float:
    if not base:
        return 0.0
    return (current - base) / base * 100


def compute_performance(
    closes: list[tuple[datetime, float]],
    current_price: float,
    now: Optional[datetime] = None,
) -> tuple[float, float]:
    """
    YTD and one-year change (percent) from a one-year monthly close series.

    One-year change is measured against the first close. YTD is measured
    against the last close on or before January 1st of the current year,
    falling back to the first close. Returns (0, 0) without data.
    """
    if not closes or current_price <= 0:
        return 0.0, 0.0

    now = now or utcnow()
    jan1 = datetime(now.year, 1, 1, tzinfo=timezone.utc)

    first_close = closes[0][1]
    ytd_close = first_close
    for timestamp, close in closes:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        if timestamp <= jan1:
            ytd_close = close

    return _pct_change(current_price, ytd_close), _pct_change(current_price, first_close)


def ticker_data_from_info(
    ticker: str,
    info: dict,
    closes: list[tuple[datetime, float]],
    fmp_profile: Optional[dict] = None,
    now: Optional[datetime] = None,
) -> TickerData:
    """
    Build TickerData from a yfinance info dict, monthly closes and an
    optional FMP profile. Raises TickerNotFoundError without a price.
    """
    fmp_profile = fmp_profile or {}
    price = _safe_float(info.get("regularMarketPrice")) or _safe_float(info.get("currentPrice"))
    if not price:
        raise TickerNotFoundError(ticker)

    ytd_change, one_year_change = compute_performance(closes, price, now)

    def number(key: str) -> float:
        return _safe_float(info.get(key)) or 0.0

    return TickerData(
        company_name=(
            info.get("longName") or info.get("shortName") or fmp_profile.get("companyName") or ticker
        ),
        description=fmp_profile.get("description") or info.get("longBusinessSummary") or "",
        sector=info.get("sector") or fmp_profile.get("sector") or "Unknown",
        industry=info.get("industry") or fmp_profile.get("industry") or "Unknown",
        market_cap=number("marketCap"),
        price=price,
        revenue=number("totalRevenue"),
        net_income=number("netIncomeToCommon"),
        eps=number("trailingEps"),
        pe_ratio=number("forwardPE"),
        pb_ratio=number("priceToBook"),
        return_on_equity=number("returnOnEquity"),
        ev_to_ebitda=number("enterpriseToEbitda"),
        ytd_change=ytd_change,
        one_year_change=one_year_change,
    )


def bdc_quote_from_info(info: dict) -> BdcQuote:
    """
    Map a yfinance info dict onto BdcQuote.

    yfinance reports dividendYield in percent already; the trailing annual
    yield is a fraction. debtToEquity is a percentage (120 = 1.2x). BDCs
    carry assets at fair value, so book value per share stands in for NAV.
    """
    dividend_yield = _safe_float(info.get("dividendYield"))
    if dividend_yield is None:
        trailing = _safe_float(info.get("trailingAnnualDividendYield"))
        if trailing is not None:
            dividend_yield = trailing * 100

    debt_to_equity = _safe_float(info.get("debtToEquity"))
    if debt_to_equity is not None:
        debt_to_equity = debt_to_equity / 100

    return BdcQuote(
        price=_safe_float(info.get("regularMarketPrice")) or _safe_float(info.get("currentPrice")),
        dividend_yield=dividend_yield,
        nav_per_share=_safe_float(info.get("bookValue")),
        debt_to_equity=debt_to_equity,
    )


# =============================================================================
# YAHOO / FMP
# =============================================================================

def _load_yahoo(ticker: str, with_history: bool) -> tuple[dict, list[tuple[datetime, float]]]:
    t = yf.Ticker(ticker)
    info = t.info or {}

    closes: list[tuple[datetime, float]] = []
    if with_history:
        try:
            hist = t.history(period="1y", interval="1mo", auto_adjust=True)
        except Exception as e:
            logger.debug("quotes.history_failed", ticker=ticker, error=str(e))
            hist = None
        if hist is not None and not hist.empty:
            for timestamp, close in hist["Close"].items():
                value = _safe_float(close)
                if value is not None:
                    closes.append((timestamp.to_pydatetime(), value))

    return info, closes


async def fetch_fmp_profile(ticker: str) -> dict:
    """FMP company profile, or {} when FMP is not configured or fails."""
    settings = get_settings()
    if not settings.fmp_api_key:
        return {}

    async with httpx.AsyncClient(timeout=15.0) as client:
        try:
            resp = await client.get(
                f"{FMP_BASE_URL}/profile",
                params={"symbol": ticker, "apikey": settings.fmp_api_key},
            )
            if resp.status_code != 200:
                logger.debug("quotes.fmp_error", ticker=ticker, status=resp.status_code)
                return {}
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("quotes.fmp_failed", ticker=ticker, error=str(e))
            return {}

    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return {}


async def fetch_ticker_data(ticker: str) -> TickerData:
    """
    Quote and profile data for the watchlist.

    Raises TickerNotFoundError when Yahoo returns no price; Yahoo errors
    propagate unchanged.
    """
    ticker = normalize_ticker(ticker)
    loop = asyncio.get_event_loop()

    yahoo_task = loop.run_in_executor(None, _load_yahoo, ticker, True)
    fmp_profile = await fetch_fmp_profile(ticker)
    try:
        info, closes = await yahoo_task
    except Exception as e:
        # Network and rate-limit errors are not a missing ticker
        logger.warning("quotes.yahoo_failed", ticker=ticker, error=str(e))
        raise

    return ticker_data_from_info(ticker, info, closes, fmp_profile)


async def fetch_bdc_quote(ticker: str) -> BdcQuote:
    """Price, yield, NAV and leverage for one BDC. Yahoo errors propagate."""
    ticker = normalize_ticker(ticker)
    loop = asyncio.get_event_loop()
    info, _ = await loop.run_in_executor(None, _load_yahoo, ticker, False)
    return bdc_quote_from_info(info)
