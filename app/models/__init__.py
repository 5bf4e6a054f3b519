"""Database and domain models for the BDC Screener"""

from .schema import (
    Base,
    Bdc,
    Holding,
    SOURCE_REPRESENTATIVE,
    SOURCE_SEC_FILING,
)
from .watchlist import AIAnalysis, TickerData, WatchlistItem

__all__ = [
    "AIAnalysis",
    "Base",
    "Bdc",
    "Holding",
    "SOURCE_REPRESENTATIVE",
    "SOURCE_SEC_FILING",
    "TickerData",
    "WatchlistItem",
]
