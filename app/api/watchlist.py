"""
Watchlist endpoints

- GET    /v1/watchlist
- POST   /v1/watchlist/analyze
- DELETE /v1/watchlist/{ticker}
- DELETE /v1/watchlist          (body: {"ticker": "ARCC"})
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from app.services.ai_analysis import analyze_ticker
from app.services.quotes import fetch_ticker_data
from app.services.utils import normalize_ticker
from app.services.watchlist import (
    Analyze,
    AnalyzeRequest,
    AnalyzeResponse,
    FetchQuote,
    analyze_tickers,
)
from app.services.watchlist_store import WatchlistStore, get_watchlist_store

router = APIRouter(prefix="/watchlist", tags=["Watchlist"])


class DeleteRequest(BaseModel):
    ticker: Optional[str] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_quote_fetcher() -> FetchQuote:
    return fetch_ticker_data


def get_analyzer() -> Analyze:
    return analyze_ticker


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.get("")
async def list_watchlist(store: WatchlistStore = Depends(get_watchlist_store)):
    """All analyzed tickers, most recently added first."""
    items = await store.load()
    return {
        "data": [item.model_dump(mode="json") for item in items],
        "meta": {"total": len(items)},
    }


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_watchlist(
    request: AnalyzeRequest,
    store: WatchlistStore = Depends(get_watchlist_store),
    fetch_quote: FetchQuote = Depends(get_quote_fetcher),
    analyze: Analyze = Depends(get_analyzer),
):
    """
    Analyze 1 to 25 tickers.

    Tickers analyzed in the last 24 hours are served from the watchlist
    without new quote or AI calls. Failures are reported per ticker in
    `errors`; they never fail the request.
    """
    return await analyze_tickers(request.tickers, store, fetch_quote, analyze)


async def _delete(ticker: Optional[str], store: WatchlistStore) -> dict:
    ticker = normalize_ticker(ticker)
    if not ticker:
        raise HTTPException(status_code=400, detail="Ticker required")
    removed = await store.delete_item(ticker)
    return {"success": True, "ticker": ticker, "removed": removed}


@router.delete("/{ticker}")
async def delete_watchlist_item(ticker: str, store: WatchlistStore = Depends(get_watchlist_store)):
    """Remove a ticker. Removing a ticker that is not listed succeeds."""
    return await _delete(ticker, store)


@router.delete("")
async def delete_watchlist_item_by_body(
    payload: Optional[DeleteRequest] = Body(None),
    store: WatchlistStore = Depends(get_watchlist_store),
):
    """Remove the ticker named in the JSON body."""
    return await _delete(payload.ticker if payload else None, store)
