"""
Watchlist models.

WatchlistItem   - one analyzed ticker as persisted in the watchlist store.
TickerData      - market snapshot returned by the quote collaborator.
AIAnalysis      - qualitative commentary and estimates from the AI collaborator.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class WatchlistItem(BaseModel):
    """One analyzed ticker."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    ticker: str

    # Market snapshot
    company_name: Optional[str] = None
    description: Optional[str] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[float] = None
    price: Optional[float] = None
    revenue: Optional[float] = None
    net_income: Optional[float] = None
    eps: Optional[float] = None
    pe_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    ev_ebitda: Optional[float] = None
    roe: Optional[float] = None
    ytd_change: Optional[float] = None
    one_year_change: Optional[float] = None

    # AI commentary
    risks: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    evaluation: Optional[str] = None

    # Freshness is judged on analyzed_at only
    analyzed_at: datetime
    created_at: datetime


class TickerData(BaseModel):
    """Quote and profile data for one ticker. Unknown numbers are 0."""

    company_name: str
    description: str = ""
    sector: str = "Unknown"
    industry: str = "Unknown"
    market_cap: float = 0
    price: float
    revenue: float = 0
    net_income: float = 0
    eps: float = 0
    pe_ratio: float = 0
    pb_ratio: float = 0
    return_on_equity: float = 0
    ev_to_ebitda: float = 0
    ytd_change: float = 0
    one_year_change: float = 0


class AIAnalysis(BaseModel):
    """
    AI commentary for one ticker.

    risks and strengths always hold exactly three entries. Numeric estimates
    are best effort; 0 means the model did not know.
    """

    risks: list[str] = Field(min_length=3, max_length=3)
    strengths: list[str] = Field(min_length=3, max_length=3)
    evaluation: str
    revenue: float = 0
    net_income: float = 0
    eps: float = 0
    pe_ratio: float = 0
    pb_ratio: float = 0
    ev_ebitda: float = 0

    # True when the model answered but the answer could not be used
    malformed: bool = False
