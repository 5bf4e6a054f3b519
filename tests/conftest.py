"""
Pytest configuration and fixtures for BDC Screener tests.

Fixtures provide:
- Sample BDC and holding records
- Sample quote data and AI analysis
- A JSON-file watchlist store in a temp directory
"""

import os
import sys
from datetime import date, datetime, timezone

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are cached on first use; pin the ones tests rely on before any app import
os.environ.setdefault("WATCHLIST_BACKEND", "file")
os.environ.setdefault("QUOTE_REQUEST_DELAY", "0")
os.environ.setdefault("SEC_REQUEST_INTERVAL", "0")
os.environ["REDIS_URL"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["FMP_API_KEY"] = ""


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no network or database")
    config.addinivalue_line("markers", "api: endpoint tests through the FastAPI test client")


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def now():
    """Fixed 'now' for freshness and performance calculations."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_bdc():
    """BDC record with a full set of metrics."""
    return {
        "cik": "0001287750",
        "name": "Ares Capital Corp",
        "ticker": "ARCC",
        "dividend_yield": 9.2,
        "dividend_growth_3yr": 4.5,
        "nav_per_share": 19.85,
        "price": 21.5,
        "price_to_nav": 1.08,
        "non_accrual_pct": 1.5,
        "total_assets": 24_500_000_000,
        "debt_to_equity": 1.05,
        "net_investment_income_yield": 10.1,
        "updated_at": datetime(2025, 6, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def sample_holdings():
    """Holdings across two periods; only 2024-09-30 is the latest."""
    def holding(period, name, industry, value, sector=None):
        return {
            "bdc_cik": "0001287750",
            "period_date": period,
            "company_name": name,
            "industry_raw": industry,
            "industry_sector": sector,
            "fair_value": value,
            "source": "sec_filing",
        }

    return [
        holding(date(2024, 6, 30), "Old Software Co", "Software", 500.0),
        holding(date(2024, 9, 30), "Cloudco", "Software & Services", 600.0),
        holding(date(2024, 9, 30), "MedCo", "Healthcare Providers", 300.0),
        holding(date(2024, 9, 30), "Widget Holdings", "Diversified Holding", 100.0),
    ]


@pytest.fixture
def ticker_data():
    """Quote data the watchlist services get from the quote collaborator."""
    from app.models import TickerData

    return TickerData(
        company_name="Ares Capital Corp",
        description="Specialty finance company.",
        sector="Financial Services",
        industry="Asset Management",
        market_cap=14_000_000_000,
        price=21.5,
        revenue=2_800_000_000,
        net_income=1_500_000_000,
        eps=2.45,
        pe_ratio=8.8,
        pb_ratio=1.08,
        return_on_equity=0.12,
        ev_to_ebitda=11.0,
        ytd_change=3.2,
        one_year_change=8.1,
    )


@pytest.fixture
def ai_analysis():
    """Well-formed AI commentary."""
    from app.models import AIAnalysis

    return AIAnalysis(
        risks=["Credit losses", "Rate cuts", "Leverage"],
        strengths=["Scale", "Track record", "Diversification"],
        evaluation="Worth further research.",
    )


@pytest.fixture
def watchlist_store(tmp_path):
    """JSON-file watchlist store in a temp directory."""
    from app.services.watchlist_store import JsonFileWatchlistStore

    return JsonFileWatchlistStore(str(tmp_path / "watchlist.json"))
