"""API endpoints for the BDC Screener"""

from .routes import router
from .watchlist import router as watchlist_router

__all__ = ["router", "watchlist_router"]
