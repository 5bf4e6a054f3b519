"""
Unit tests for BDC ingestion: representative holdings, default metrics,
filing parsing and the SEC import with its representative fallback.
"""

import pytest
import sys
import os
import random
from types import SimpleNamespace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app.models import SOURCE_REPRESENTATIVE, SOURCE_SEC_FILING
from app.services import bdc_store
from app.services import ingestion
from app.services.ingestion import (
    companies_for_sector,
    generate_default_metrics,
    generate_representative_holdings,
    holdings_from_filing,
    import_bdcs,
    import_financial_metrics,
    import_holdings_from_sec,
)
from app.services.portfolio import METRIC_FIELDS, aggregate_holdings
from app.services.reference_data import (
    CURATED_METRICS,
    EXCLUDED_TICKERS,
    REPRESENTATIVE_ALLOCATIONS,
    TRACKED_BDCS,
    Allocation,
    BdcReference,
    get_curated_metrics,
)
from app.services.sec_client import (
    FilingInfo,
    latest_filing_from_submissions,
    parse_filing_for_holdings,
)

ARCC_CIK = "0001287750"

FILING_HTML = """
<table>
<tr><td class="company-name">Acme Software Holdings LLC</td>
    <td class="industry">Software &amp; Services</td>
    <td class="fair-value">$ 12,500.0</td></tr>
<tr><td class="company-name">Sunrise Medical Group</td>
    <td class="industry">Health Care Providers</td>
    <td class="fair-value">7,500</td></tr>
<tr><td class="company-name">Written Off Co Inc</td>
    <td class="industry">Retail</td>
    <td class="fair-value">0</td></tr>
</table>
"""


class TestRepresentativeHoldings:
    """Tests for generate_representative_holdings()."""

    @pytest.mark.unit
    @pytest.mark.parametrize("pct, expected", [(0.5, 2), (6.0, 2), (12.5, 4), (18.5, 6), (42.5, 8)])
    def test_companies_per_sector(self, pct, expected):
        """Between 2 and 8 companies per sector."""
        assert companies_for_sector(pct) == expected

    @pytest.mark.unit
    def test_same_seed_same_holdings(self):
        allocation = REPRESENTATIVE_ALLOCATIONS[ARCC_CIK]
        first = generate_representative_holdings(ARCC_CIK, allocation, random.Random(42))
        second = generate_representative_holdings(ARCC_CIK, allocation, random.Random(42))
        assert first == second

    @pytest.mark.unit
    def test_rows_marked_representative(self):
        allocation = REPRESENTATIVE_ALLOCATIONS[ARCC_CIK]
        holdings = generate_representative_holdings(ARCC_CIK, allocation, random.Random(1))
        assert len(holdings) == 30
        assert all(h["source"] == SOURCE_REPRESENTATIVE for h in holdings)
        assert all(h["bdc_cik"] == ARCC_CIK for h in holdings)
        assert all(h["period_date"] == "2025-09-30" for h in holdings)

    @pytest.mark.unit
    def test_values_track_allocation(self):
        """Each sector's value stays within the 0.7x to 1.3x variation band."""
        allocation = Allocation(1_000_000, {"Healthcare": 60.0, "Energy": 40.0})
        holdings = generate_representative_holdings("1", allocation, random.Random(7))

        healthcare = sum(h["fair_value"] for h in holdings if h["industry_sector"] == "Healthcare")
        assert 0.7 * 600_000 - 10 <= healthcare <= 1.3 * 600_000 + 10
        assert {h["industry_sector"] for h in holdings} == {"Healthcare", "Energy"}

    @pytest.mark.unit
    def test_aggregates_to_every_allocated_sector(self):
        allocation = REPRESENTATIVE_ALLOCATIONS[ARCC_CIK]
        exposure = aggregate_holdings(generate_representative_holdings(ARCC_CIK, allocation, random.Random(3)))
        for sector in allocation.sectors:
            assert exposure.sector_exposures[sector] > 0
        assert sum(exposure.sector_exposures.values()) == pytest.approx(100.0)

    @pytest.mark.unit
    def test_zero_percentages_dropped(self):
        assert "Industrials" not in REPRESENTATIVE_ALLOCATIONS["0001811882"].sectors


class TestDefaultMetrics:
    """Tests for generate_default_metrics() and curated metrics."""

    @pytest.mark.unit
    def test_every_metric_generated(self):
        metrics = generate_default_metrics("Some BDC Inc", random.Random(42))
        assert set(metrics) == set(METRIC_FIELDS)

    @pytest.mark.unit
    def test_deterministic(self):
        assert (
            generate_default_metrics("Some BDC Inc", random.Random(5))
            == generate_default_metrics("Some BDC Inc", random.Random(5))
        )

    @pytest.mark.unit
    def test_venture_lenders_yield_more(self):
        """Venture names start from a higher yield baseline."""
        venture = generate_default_metrics("Venture Lending Fund", random.Random(0))
        plain = generate_default_metrics("Main Street Lending", random.Random(0))
        assert venture["dividend_yield"] - plain["dividend_yield"] == pytest.approx(2.0)

    @pytest.mark.unit
    def test_price_consistent_with_nav(self):
        metrics = generate_default_metrics("Some BDC Inc", random.Random(9))
        assert metrics["price"] == pytest.approx(metrics["nav_per_share"] * metrics["price_to_nav"])

    @pytest.mark.unit
    def test_curated_lookup(self):
        metrics = get_curated_metrics("arcc")
        assert metrics["dividend_yield"] == 9.2
        assert set(metrics) == set(METRIC_FIELDS)
        assert get_curated_metrics("NOPE") is None
        assert get_curated_metrics(None) is None

    @pytest.mark.unit
    def test_curated_copy_is_independent(self):
        get_curated_metrics("ARCC")["dividend_yield"] = 0
        assert CURATED_METRICS["ARCC"]["dividend_yield"] == 9.2


class TestReferenceData:
    """Tests for the tracked BDC list."""

    @pytest.mark.unit
    def test_excluded_tickers_not_tracked(self):
        assert not {b.ticker for b in TRACKED_BDCS} & EXCLUDED_TICKERS

    @pytest.mark.unit
    def test_ciks_are_padded(self):
        assert all(len(b.cik) == 10 for b in TRACKED_BDCS)


class TestFilingParser:
    """Tests for parse_filing_for_holdings() and holdings_from_filing()."""

    @pytest.mark.unit
    def test_parses_tagged_rows(self):
        holdings = parse_filing_for_holdings(FILING_HTML)
        assert [h.company_name for h in holdings] == ["Acme Software Holdings LLC", "Sunrise Medical Group"]
        assert holdings[0].fair_value == 12500.0

    @pytest.mark.unit
    def test_no_match(self):
        assert parse_filing_for_holdings("<p>No schedule here</p>") == []
        assert parse_filing_for_holdings("") == []

    @pytest.mark.unit
    def test_holdings_from_filing_classifies(self):
        records = holdings_from_filing(ARCC_CIK, FILING_HTML, "2025-02-15")
        assert [r["industry_sector"] for r in records] == ["Software & Technology", "Healthcare"]
        assert all(r["source"] == SOURCE_SEC_FILING for r in records)
        assert all(r["period_date"] == "2025-02-15" for r in records)

    @pytest.mark.unit
    def test_latest_filing_from_submissions(self):
        submissions = {"filings": {"recent": {
            "form": ["8-K", "10-Q", "10-K"],
            "filingDate": ["2025-03-01", "2025-02-15", "2024-11-01"],
            "accessionNumber": ["a", "0001287750-25-000010", "c"],
            "primaryDocument": ["x.htm", "arcc-10q.htm", "z.htm"],
        }}}
        filing = latest_filing_from_submissions(submissions)
        assert filing.form_type == "10-Q"
        assert filing.accession_number == "0001287750-25-000010"
        assert latest_filing_from_submissions({}) is None


# =============================================================================
# Database steps (bdc_store monkeypatched)
# =============================================================================

class StubSession:
    def __init__(self):
        self.rollbacks = 0

    async def rollback(self):
        self.rollbacks += 1


class StubEdgar:
    """EDGAR client double: every CIK has a 10-Q; some downloads fail."""

    def __init__(self, html, failing=()):
        self.html = html
        self.failing = set(failing)

    async def get_latest_filing(self, cik):
        return FilingInfo(
            form_type="10-Q", filing_date="2025-02-15",
            accession_number="0000000000-25-000001", primary_document="doc.htm",
        )

    async def download_filing(self, cik, filing):
        if cik in self.failing:
            raise RuntimeError("403 Forbidden")
        return self.html


@pytest.fixture
def stored(monkeypatch):
    """Capture replace_holdings / update_bdc_fields calls."""
    calls = {"holdings": {}, "fields": {}}

    async def replace_holdings(session, cik, records):
        calls["holdings"][cik] = records
        return len(records)

    async def update_bdc_fields(session, cik, fields):
        calls["fields"][cik] = fields

    monkeypatch.setattr(bdc_store, "replace_holdings", replace_holdings)
    monkeypatch.setattr(bdc_store, "update_bdc_fields", update_bdc_fields)
    return calls


def bdcs(count):
    return [BdcReference(f"T{i}", f"BDC {i}", f"{i:010d}") for i in range(count)]


class TestImportBdcs:
    """Tests for import_bdcs()."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upserts_only_selected(self, monkeypatch):
        """A narrowed selection upserts just those BDCs."""
        upserted = []

        async def upsert_bdcs(session, records):
            upserted.extend(records)
            return len(records)

        monkeypatch.setattr(bdc_store, "upsert_bdcs", upsert_bdcs)
        count = await import_bdcs(StubSession(), bdcs(2))

        assert count == 2
        assert [r["ticker"] for r in upserted] == ["T0", "T1"]
        assert upserted[0] == {"cik": "0000000000", "name": "BDC 0", "ticker": "T0"}


class TestImportHoldingsFromSec:
    """Tests for import_holdings_from_sec()."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_enough_successes_no_fallback(self, stored):
        stats = await import_holdings_from_sec(
            StubSession(), StubEdgar(FILING_HTML), random.Random(42), bdcs=bdcs(5)
        )
        assert stats.bdcs_imported == 5
        assert stats.holdings_imported == 10
        assert not stats.used_representative

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failures_skipped_and_fallback_used(self, stored, monkeypatch):
        """Fewer than five parsed BDCs triggers representative data."""
        monkeypatch.setattr(
            ingestion, "REPRESENTATIVE_ALLOCATIONS", {"0000000099": Allocation(1e6, {"Energy": 100.0})}
        )
        session = StubSession()
        edgar = StubEdgar(FILING_HTML, failing={"0000000001"})

        stats = await import_holdings_from_sec(session, edgar, random.Random(42), bdcs=bdcs(3))

        assert stats.bdcs_imported == 2
        assert stats.failures == [{"ticker": "T1", "error": "403 Forbidden"}]
        assert session.rollbacks == 1
        assert stats.used_representative
        assert all(r["source"] == SOURCE_REPRESENTATIVE for r in stored["holdings"]["0000000099"])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fallback_disabled(self, stored):
        stats = await import_holdings_from_sec(
            StubSession(), StubEdgar("<p>nothing</p>"), random.Random(42), bdcs=bdcs(2), allow_fallback=False
        )
        assert stats.bdcs_imported == 0
        assert not stats.used_representative
        assert stored["holdings"] == {}


class TestImportFinancialMetrics:
    """Tests for import_financial_metrics()."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_curated_and_defaults(self, stored, monkeypatch):
        async def fetch_all_bdcs(session):
            return [
                SimpleNamespace(cik="1", ticker="ARCC", name="Ares Capital"),
                SimpleNamespace(cik="2", ticker="NEWBDC", name="New Venture Capital"),
            ]

        monkeypatch.setattr(bdc_store, "fetch_all_bdcs", fetch_all_bdcs)

        stats = await import_financial_metrics(StubSession(), random.Random(42))

        assert stats == {"updated": 2, "defaults": 1, "errors": 0}
        assert stored["fields"]["1"]["dividend_yield"] == 9.2
        assert "updated_at" in stored["fields"]["2"]
