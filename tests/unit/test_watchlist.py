"""
Unit tests for the watchlist service and the JSON-file watchlist store.

Covers the 24h freshness window, AI failure placeholders, merge rules,
batch error collection and store semantics.
"""

import pytest
import sys
import os
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from pydantic import ValidationError

from app.core.config import get_settings
from app.models import AIAnalysis, WatchlistItem
from app.services.quotes import TickerNotFoundError
from app.services.watchlist import (
    AI_UNAVAILABLE,
    AnalyzeRequest,
    analyze_tickers,
    build_item,
    get_or_refresh,
    is_fresh,
)


class Collaborators:
    """Fake quote and AI collaborators that record their calls."""

    def __init__(self, data, analysis=None, ai_error=None, missing=()):
        self.data = data
        self.analysis = analysis
        self.ai_error = ai_error
        self.missing = set(missing)
        self.quote_calls = []
        self.ai_calls = []

    async def fetch_quote(self, ticker):
        self.quote_calls.append(ticker)
        if ticker in self.missing:
            raise TickerNotFoundError(ticker)
        return self.data

    async def analyze(self, ticker, data):
        self.ai_calls.append(ticker)
        if self.ai_error:
            raise self.ai_error
        return self.analysis


def stored_item(ticker, analyzed_at):
    return WatchlistItem(
        ticker=ticker,
        company_name="Stored Co",
        price=10.0,
        risks=["a", "b", "c"],
        strengths=["d", "e", "f"],
        evaluation="Stored evaluation.",
        analyzed_at=analyzed_at,
        created_at=analyzed_at,
    )


# =============================================================================
# Freshness
# =============================================================================

class TestFreshness:
    """Tests for is_fresh()."""

    @pytest.mark.unit
    def test_23_hours_is_fresh(self, now):
        assert is_fresh(stored_item("ARCC", now - timedelta(hours=23)), now, hours=24)

    @pytest.mark.unit
    def test_25_hours_is_stale(self, now):
        assert not is_fresh(stored_item("ARCC", now - timedelta(hours=25)), now, hours=24)

    @pytest.mark.unit
    def test_naive_timestamp_is_utc(self, now):
        """Timestamps stored without an offset are read as UTC."""
        naive = (now - timedelta(hours=1)).replace(tzinfo=None)
        assert is_fresh(stored_item("ARCC", naive), now, hours=24)


# =============================================================================
# Merge
# =============================================================================

class TestBuildItem:
    """Tests for build_item()."""

    @pytest.mark.unit
    def test_nonzero_ai_estimates_override(self, ticker_data, ai_analysis, now):
        analysis = ai_analysis.model_copy(update={"revenue": 3_000_000_000, "pe_ratio": 9.5})
        item = build_item("ARCC", ticker_data, analysis, now)
        assert item.revenue == 3_000_000_000
        assert item.pe_ratio == 9.5

    @pytest.mark.unit
    def test_zero_ai_estimates_fall_back_to_quote(self, ticker_data, ai_analysis, now):
        item = build_item("ARCC", ticker_data, ai_analysis, now)
        assert item.revenue == ticker_data.revenue
        assert item.eps == ticker_data.eps
        assert item.ev_ebitda == ticker_data.ev_to_ebitda

    @pytest.mark.unit
    def test_roe_and_performance_from_quote(self, ticker_data, ai_analysis, now):
        item = build_item("ARCC", ticker_data, ai_analysis, now)
        assert item.roe == ticker_data.return_on_equity
        assert item.ytd_change == ticker_data.ytd_change
        assert item.one_year_change == ticker_data.one_year_change
        assert item.analyzed_at == now


# =============================================================================
# Get or refresh
# =============================================================================

class TestGetOrRefresh:
    """Tests for get_or_refresh()."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fresh_item_served_without_calls(self, watchlist_store, ticker_data, ai_analysis, now):
        """An item analyzed 23h ago is returned without quote or AI calls."""
        await watchlist_store.upsert_item(stored_item("ARCC", now - timedelta(hours=23)))
        fakes = Collaborators(ticker_data, ai_analysis)

        item = await get_or_refresh("arcc", watchlist_store, fakes.fetch_quote, fakes.analyze, now=now)

        assert item.company_name == "Stored Co"
        assert fakes.quote_calls == []
        assert fakes.ai_calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_item_refreshed(self, watchlist_store, ticker_data, ai_analysis, now):
        """An item analyzed 25h ago is re-analyzed and replaced in place."""
        await watchlist_store.upsert_item(stored_item("ARCC", now - timedelta(hours=25)))
        fakes = Collaborators(ticker_data, ai_analysis)

        item = await get_or_refresh("ARCC", watchlist_store, fakes.fetch_quote, fakes.analyze, now=now)

        assert fakes.quote_calls == ["ARCC"]
        assert fakes.ai_calls == ["ARCC"]
        assert item.company_name == ticker_data.company_name
        stored = await watchlist_store.load()
        assert len(stored) == 1
        assert stored[0].analyzed_at == now

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ai_failure_stores_placeholder(self, watchlist_store, ticker_data, now):
        """AI errors never fail the ticker; the placeholder is stored."""
        fakes = Collaborators(ticker_data, ai_error=RuntimeError("quota exceeded"))

        item = await get_or_refresh("ARCC", watchlist_store, fakes.fetch_quote, fakes.analyze, now=now)

        assert item.risks == [AI_UNAVAILABLE] * 3
        assert item.strengths == [AI_UNAVAILABLE] * 3
        assert item.price == ticker_data.price
        assert (await watchlist_store.get_item("ARCC")) is not None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_quote_failure_propagates(self, watchlist_store, ticker_data, ai_analysis, now):
        fakes = Collaborators(ticker_data, ai_analysis, missing={"ZZZZ"})
        with pytest.raises(TickerNotFoundError):
            await get_or_refresh("ZZZZ", watchlist_store, fakes.fetch_quote, fakes.analyze, now=now)
        assert fakes.ai_calls == []
        assert await watchlist_store.load() == []


class TestAnalyzeTickers:
    """Tests for analyze_tickers()."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_batch_collects_errors(self, watchlist_store, ticker_data, ai_analysis, now):
        """A failing ticker is reported and the rest of the batch still runs."""
        fakes = Collaborators(ticker_data, ai_analysis, missing={"ZZZZ"})

        response = await analyze_tickers(
            ["arcc", "ZZZZ", " main "], watchlist_store, fakes.fetch_quote, fakes.analyze, now=now
        )

        assert [item.ticker for item in response.results] == ["ARCC", "MAIN"]
        assert len(response.errors) == 1
        assert response.errors[0].ticker == "ZZZZ"
        assert "not found" in response.errors[0].error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_tickers_dropped(self, watchlist_store, ticker_data, ai_analysis, now):
        """Blank and over-long tickers are skipped before any lookup."""
        fakes = Collaborators(ticker_data, ai_analysis)

        response = await analyze_tickers(
            ["", "   ", "ABCDEFGHIJK", "GBDC"], watchlist_store, fakes.fetch_quote, fakes.analyze, now=now
        )

        assert fakes.quote_calls == ["GBDC"]
        assert [item.ticker for item in response.results] == ["GBDC"]
        assert response.errors == []


class TestAnalyzeRequest:
    """Tests for AnalyzeRequest validation."""

    @pytest.mark.unit
    def test_empty_list_raises(self):
        with pytest.raises(ValidationError):
            AnalyzeRequest(tickers=[])

    @pytest.mark.unit
    def test_26_tickers_raises(self):
        with pytest.raises(ValidationError):
            AnalyzeRequest(tickers=[f"T{i}" for i in range(26)])

    @pytest.mark.unit
    def test_25_tickers_succeeds(self):
        req = AnalyzeRequest(tickers=[f"T{i}" for i in range(25)])
        assert len(req.tickers) == 25

    @pytest.mark.unit
    def test_limit_from_settings(self, monkeypatch):
        """WATCHLIST_MAX_BATCH caps the batch size."""
        monkeypatch.setattr(get_settings(), "watchlist_max_batch", 2)
        AnalyzeRequest(tickers=["ARCC", "MAIN"])
        with pytest.raises(ValidationError):
            AnalyzeRequest(tickers=["ARCC", "MAIN", "OBDC"])


# =============================================================================
# Store
# =============================================================================

class TestJsonFileWatchlistStore:
    """Tests for JsonFileWatchlistStore."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, watchlist_store):
        assert await watchlist_store.load() == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_corrupt_file_reads_empty(self, watchlist_store):
        watchlist_store.path.write_text("{not json", encoding="utf-8")
        assert await watchlist_store.load() == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upsert_prepends_new_tickers(self, watchlist_store, now):
        await watchlist_store.upsert_item(stored_item("ARCC", now))
        await watchlist_store.upsert_item(stored_item("MAIN", now))
        assert [item.ticker for item in await watchlist_store.load()] == ["MAIN", "ARCC"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upsert_replaces_in_place(self, watchlist_store, now):
        await watchlist_store.upsert_item(stored_item("ARCC", now - timedelta(days=2)))
        await watchlist_store.upsert_item(stored_item("MAIN", now))
        await watchlist_store.upsert_item(stored_item("ARCC", now))

        items = await watchlist_store.load()
        assert [item.ticker for item in items] == ["MAIN", "ARCC"]
        assert items[1].analyzed_at == now

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete(self, watchlist_store, now):
        await watchlist_store.upsert_item(stored_item("ARCC", now))
        assert await watchlist_store.delete_item("arcc") is True
        assert await watchlist_store.load() == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, watchlist_store, now):
        """Deleting a ticker that is not stored succeeds and changes nothing."""
        await watchlist_store.upsert_item(stored_item("ARCC", now))
        assert await watchlist_store.delete_item("MAIN") is False
        assert [item.ticker for item in await watchlist_store.load()] == ["ARCC"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_missing_does_not_create_file(self, watchlist_store):
        assert await watchlist_store.delete_item("NOPE") is False
        assert not watchlist_store.path.exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_missing_leaves_unreadable_file_alone(self, watchlist_store):
        """An unreadable file is not overwritten by a delete that removes nothing."""
        watchlist_store.path.write_text("{corrupt", encoding="utf-8")
        assert await watchlist_store.delete_item("NOPE") is False
        assert watchlist_store.path.read_text(encoding="utf-8") == "{corrupt"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_round_trip_keeps_timestamps(self, watchlist_store):
        analyzed_at = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        await watchlist_store.upsert_item(stored_item("ARCC", analyzed_at))
        item = await watchlist_store.get_item("ARCC")
        assert item.analyzed_at == analyzed_at
