"""
Portfolio Aggregation Service

Turns a BDC's holdings into sector exposures and merges them with the BDC's
scalar financial metrics into one screener row.

Pure functions only: callers fetch holdings and BDC records from the store
and pass them in. Holdings and BDCs may be ORM rows, dicts, or any object
exposing the same attribute names.

Rules:
- Only the latest reporting period counts. Older periods are dropped, never
  mixed into the same exposure.
- Every sector is present in the output, with 0 where the BDC holds nothing.
- Percentages sum to 100 when total fair value > 0, and are all 0 otherwise.
- Missing metrics stay None. They are never coerced to 0 here.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from app.services.sector_classifier import SECTORS, classify_sector, is_sector


# Scalar metrics carried from the BDC record into screener rows
METRIC_FIELDS: tuple[str, ...] = (
    "dividend_yield",
    "dividend_growth_3yr",
    "nav_per_share",
    "price",
    "price_to_nav",
    "non_accrual_pct",
    "total_assets",
    "debt_to_equity",
    "net_investment_income_yield",
)


@dataclass
class SectorExposure:
    """Sector breakdown of one BDC's latest reporting period."""
    period_date: str = ""
    total_fair_value: float = 0.0
    sector_exposures: dict[str, float] = field(default_factory=lambda: {sector: 0.0 for sector in SECTORS})


@dataclass
class SectorSummary:
    """One row of a BDC's sector breakdown (detail view)."""
    sector: str
    value: float
    percentage: float
    count: int


class BdcView(BaseModel):
    """Screener row: identity, scalar metrics and sector exposures."""

    cik: str
    name: str
    ticker: Optional[str] = None
    period_date: str = ""
    total_fair_value: float = 0.0
    sector_exposures: dict[str, float]

    dividend_yield: Optional[float] = None
    dividend_growth_3yr: Optional[float] = None
    nav_per_share: Optional[float] = None
    price: Optional[float] = None
    price_to_nav: Optional[float] = None
    non_accrual_pct: Optional[float] = None
    total_assets: Optional[float] = None
    debt_to_equity: Optional[float] = None
    net_investment_income_yield: Optional[float] = None


# =============================================================================
# HELPERS
# =============================================================================

def empty_exposures() -> dict[str, float]:
    return {sector: 0.0 for sector in SECTORS}


def get_field(record: Any, name: str, default=None):
    """Read a field from a mapping or an object."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _period_key(holding: Any) -> str:
    period = get_field(holding, "period_date")
    if period is None:
        return ""
    # Date columns come back as date objects; compare as ISO strings
    return period.isoformat() if hasattr(period, "isoformat") else str(period)


def resolve_sector(holding: Any) -> str:
    """
    Stored industry_sector when it names a taxonomy sector, otherwise
    classify industry_raw. Labels outside the taxonomy would break the
    100% total, so they are reclassified.
    """
    stored = get_field(holding, "industry_sector")
    if stored and is_sector(stored):
        return stored
    return classify_sector(get_field(holding, "industry_raw"))


def latest_period_holdings(holdings: Iterable[Any]) -> tuple[str, list]:
    """
    Return (latest_period, holdings_in_that_period).

    The latest period is the maximum period_date string. Empty input gives
    ("", []).
    """
    holdings = list(holdings)
    if not holdings:
        return "", []

    latest = max(_period_key(h) for h in holdings)
    return latest, [h for h in holdings if _period_key(h) == latest]


# =============================================================================
# AGGREGATION
# =============================================================================

def aggregate_holdings(holdings: Iterable[Any]) -> SectorExposure:
    """
    Aggregate a BDC's holdings into sector exposure percentages.

    STEPS
    -----
    1. Empty input -> period "", total 0, every sector 0
    2. Keep only holdings from the latest period_date
    3. Sum fair values (missing fair value counts as 0)
    4. Sum fair values per resolved sector
    5. Divide each sector sum by the total (0 when the total is not positive)

    Negative or zero fair values are summed as-is.
    """
    latest_period, latest = latest_period_holdings(holdings)
    if not latest:
        return SectorExposure()

    sector_totals: dict[str, float] = {}
    total_fair_value = 0.0
    for holding in latest:
        value = _to_float(get_field(holding, "fair_value")) or 0.0
        total_fair_value += value
        sector = resolve_sector(holding)
        sector_totals[sector] = sector_totals.get(sector, 0.0) + value

    exposures = empty_exposures()
    if total_fair_value > 0:
        for sector in SECTORS:
            exposures[sector] = (sector_totals.get(sector, 0.0) / total_fair_value) * 100

    return SectorExposure(
        period_date=latest_period,
        total_fair_value=total_fair_value,
        sector_exposures=exposures,
    )


def summarize_sectors(holdings: Iterable[Any]) -> list[SectorSummary]:
    """
    Sector breakdown for the BDC detail page.

    Latest period only. Sectors with no positive value are dropped and the
    rest are sorted by value, largest first.
    """
    _, latest = latest_period_holdings(holdings)

    totals: dict[str, float] = {}
    counts: dict[str, int] = {}
    total_value = 0.0
    for holding in latest:
        value = _to_float(get_field(holding, "fair_value")) or 0.0
        total_value += value
        sector = resolve_sector(holding)
        totals[sector] = totals.get(sector, 0.0) + value
        counts[sector] = counts.get(sector, 0) + 1

    summary = [
        SectorSummary(
            sector=sector,
            value=totals.get(sector, 0.0),
            percentage=(totals.get(sector, 0.0) / total_value) * 100 if total_value > 0 else 0.0,
            count=counts.get(sector, 0),
        )
        for sector in SECTORS
    ]
    summary = [s for s in summary if s.value > 0]
    summary.sort(key=lambda s: s.value, reverse=True)
    return summary


# =============================================================================
# MERGE
# =============================================================================

def has_any_metric(bdc: Any) -> bool:
    return any(get_field(bdc, name) is not None for name in METRIC_FIELDS)


def merge_view(bdc: Any, exposure: SectorExposure) -> Optional[BdcView]:
    """
    Combine a BDC record with its sector exposure into a screener row.

    Returns None for BDCs with no holdings value and no metrics at all, so
    empty rows never reach the screener. Everything else is kept, with
    missing fields left as None.
    """
    if exposure.total_fair_value == 0 and not has_any_metric(bdc):
        return None

    metrics = {name: _to_float(get_field(bdc, name)) for name in METRIC_FIELDS}

    return BdcView(
        cik=get_field(bdc, "cik"),
        name=get_field(bdc, "name"),
        ticker=get_field(bdc, "ticker"),
        period_date=exposure.period_date,
        total_fair_value=exposure.total_fair_value,
        sector_exposures=dict(exposure.sector_exposures),
        **metrics,
    )


def build_screener_rows(
    bdcs: Iterable[Any],
    holdings_by_cik: Mapping[str, Iterable[Any]],
) -> list[BdcView]:
    """Aggregate and merge every BDC, dropping the empty ones."""
    rows = []
    for bdc in bdcs:
        exposure = aggregate_holdings(holdings_by_cik.get(get_field(bdc, "cik"), []))
        row = merge_view(bdc, exposure)
        if row is not None:
            rows.append(row)
    return rows
