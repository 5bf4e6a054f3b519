"""
API tests for the screener endpoints.

Runs the FastAPI app in-process with TestClient. The database session is
replaced by a stub and bdc_store reads are monkeypatched, so no PostgreSQL
is needed.
"""

import pytest
import sys
import os
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from fastapi.testclient import TestClient

from app.api.routes import get_bdc_quote_fetcher
from app.core.database import get_db
from app.main import app
from app.services import bdc_store
from app.services.quotes import BdcQuote
from app.services.sector_classifier import SECTORS


class StubSession:
    async def execute(self, *args, **kwargs):
        return None

    async def rollback(self):
        pass


async def override_get_db():
    yield StubSession()


@pytest.fixture
def client(monkeypatch, sample_bdc, sample_holdings):
    """TestClient over two BDCs: ARCC with holdings, MAIN with metrics only."""
    other = {
        "cik": "0001396440",
        "name": "Main Street Capital",
        "ticker": "MAIN",
        "dividend_yield": 6.2,
        "price_to_nav": 1.83,
        "updated_at": None,
    }
    representative = [
        dict(h, bdc_cik="0001396440", source="representative", period_date=date(2025, 9, 30))
        for h in sample_holdings[1:2]
    ]
    bdcs = {sample_bdc["cik"]: sample_bdc, other["cik"]: other}
    holdings = {sample_bdc["cik"]: sample_holdings, other["cik"]: representative}

    async def fetch_all_bdcs(session):
        return list(bdcs.values())

    async def fetch_bdc(session, cik):
        return bdcs.get(cik)

    async def fetch_holdings_by_cik(session):
        return holdings

    async def fetch_holdings_for_bdc(session, cik):
        return holdings.get(cik, [])

    monkeypatch.setattr(bdc_store, "fetch_all_bdcs", fetch_all_bdcs)
    monkeypatch.setattr(bdc_store, "fetch_bdc", fetch_bdc)
    monkeypatch.setattr(bdc_store, "fetch_holdings_by_cik", fetch_holdings_by_cik)
    monkeypatch.setattr(bdc_store, "fetch_holdings_for_bdc", fetch_holdings_for_bdc)

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestListBdcs:
    """Tests for GET /v1/bdcs."""

    @pytest.mark.api
    def test_returns_rows_and_meta(self, client):
        response = client.get("/v1/bdcs")
        assert response.status_code == 200
        body = response.json()
        assert [row["ticker"] for row in body["data"]] == ["ARCC", "MAIN"]
        assert body["meta"]["total"] == 2
        assert body["meta"]["sort"] == "dividend_yield"
        assert body["meta"]["summary"]["bdc_count"] == 2
        assert body["meta"]["last_updated"].startswith("2025-06-01")

    @pytest.mark.api
    def test_row_has_every_sector(self, client):
        row = client.get("/v1/bdcs").json()["data"][0]
        assert set(row["sector_exposures"]) == set(SECTORS)
        assert row["sector_exposures"]["Software & Technology"] == pytest.approx(60.0)

    @pytest.mark.api
    def test_sort_ascending(self, client):
        body = client.get("/v1/bdcs", params={"sort": "dividend_yield", "order": "asc"}).json()
        assert [row["ticker"] for row in body["data"]] == ["MAIN", "ARCC"]

    @pytest.mark.api
    def test_sector_filter(self, client):
        body = client.get("/v1/bdcs", params={"sector": "Healthcare"}).json()
        assert [row["ticker"] for row in body["data"]] == ["ARCC"]
        # summary covers the whole universe, not the filtered rows
        assert body["meta"]["summary"]["bdc_count"] == 2

    @pytest.mark.api
    @pytest.mark.parametrize("params", [
        {"sort": "market_mood"},
        {"order": "sideways"},
        {"sector": "Crypto"},
    ])
    def test_invalid_params_400(self, client, params):
        response = client.get("/v1/bdcs", params=params)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "bad_request"


class TestBdcDetail:
    """Tests for GET /v1/bdcs/{cik}."""

    @pytest.mark.api
    def test_detail(self, client, sample_bdc):
        response = client.get(f"/v1/bdcs/{sample_bdc['cik']}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["bdc"]["ticker"] == "ARCC"
        assert data["period_date"] == "2024-09-30"
        assert data["total_fair_value"] == 1000.0
        assert [h["company_name"] for h in data["holdings"]] == ["Cloudco", "MedCo", "Widget Holdings"]
        assert data["sectors"][0] == {
            "sector": "Software & Technology",
            "value": 600.0,
            "percentage": 60.0,
            "count": 1,
            "color": "#3B82F6",
        }
        assert data["is_representative"] is False

    @pytest.mark.api
    def test_representative_flag(self, client):
        data = client.get("/v1/bdcs/0001396440").json()["data"]
        assert data["is_representative"] is True

    @pytest.mark.api
    def test_unknown_cik_404(self, client):
        response = client.get("/v1/bdcs/0000000000")
        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "not_found", "message": "BDC 0000000000 not found"}
        }


class TestSystemEndpoints:
    """Tests for /v1/sectors, /v1/ping, /v1/health and the price refresh."""

    @pytest.mark.api
    def test_sectors(self, client):
        data = client.get("/v1/sectors").json()["data"]
        assert [s["sector"] for s in data] == list(SECTORS)

    @pytest.mark.api
    def test_ping(self, client):
        assert client.get("/v1/ping").json() == {"status": "ok"}

    @pytest.mark.api
    def test_health(self, client):
        body = client.get("/v1/health").json()
        assert body["status"] == "healthy"
        assert body["checks"]["cache"] == "not configured"
        assert body["checks"]["ai"] == "not configured"

    @pytest.mark.api
    def test_refresh_prices(self, client, monkeypatch):
        written = {}

        async def fetch_bdcs_with_tickers(session):
            return [
                type("Row", (), {"cik": "1", "ticker": "ARCC"})(),
                type("Row", (), {"cik": "2", "ticker": "GONE"})(),
            ]

        async def update_bdc_fields(session, cik, fields):
            written[cik] = fields

        async def fake_quote(ticker):
            if ticker == "GONE":
                return BdcQuote()
            return BdcQuote(price=20.0, nav_per_share=19.0)

        monkeypatch.setattr(bdc_store, "fetch_bdcs_with_tickers", fetch_bdcs_with_tickers)
        monkeypatch.setattr(bdc_store, "update_bdc_fields", update_bdc_fields)
        app.dependency_overrides[get_bdc_quote_fetcher] = lambda: fake_quote

        body = client.get("/v1/cron/refresh-prices").json()

        assert body["success"] is True
        assert body["summary"] == {"total": 2, "updated": 1, "errors": 0, "skipped": 1}
        assert written["1"]["price_to_nav"] == pytest.approx(1.05)
