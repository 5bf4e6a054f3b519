"""
Screener Ranking & Summary

Sorting, sector filtering and headline statistics over screener rows built
by app.services.portfolio. No storage or network access.

Nulls sort as 0, but statistics skip them: the average of [10, None, 20]
is 15, not 10.
"""

from typing import Any, Iterable, Optional, Sequence

from app.services.portfolio import METRIC_FIELDS, get_field
from app.services.sector_classifier import SECTORS

DEFAULT_SORT_KEY = "dividend_yield"
ALL_SECTORS = "all"
SOFTWARE_SECTOR = "Software & Technology"

SORT_KEYS: tuple[str, ...] = ("name", "total_fair_value") + METRIC_FIELDS + SECTORS


def _sort_value(row: Any, key: str):
    if key == "name":
        return (get_field(row, "name") or "").lower()
    if key == "total_fair_value":
        return get_field(row, "total_fair_value") or 0
    if key in METRIC_FIELDS:
        return get_field(row, key) or 0
    exposures = get_field(row, "sector_exposures") or {}
    return exposures.get(key) or 0


def sort_rows(
    rows: Iterable[Any],
    key: str = DEFAULT_SORT_KEY,
    descending: bool = True,
) -> list:
    """
    Stable sort of screener rows by name, total fair value, any metric or any
    sector percentage. Rows that compare equal keep their input order in both
    directions.

    Raises ValueError for an unknown key.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key}")
    return sorted(rows, key=lambda row: _sort_value(row, key), reverse=descending)


def filter_by_sector(rows: Iterable[Any], sector: str = ALL_SECTORS) -> list:
    """
    Keep rows with a strictly positive exposure to `sector`.

    "all" applies no filter. Raises ValueError for an unknown sector.
    """
    rows = list(rows)
    if sector == ALL_SECTORS:
        return rows
    if sector not in SECTORS:
        raise ValueError(f"Unknown sector: {sector}")
    return [
        row for row in rows
        if ((get_field(row, "sector_exposures") or {}).get(sector) or 0) > 0
    ]


def average_metric(rows: Iterable[Any], field: str) -> Optional[float]:
    """Mean of a metric over the rows that have it. None when no row does."""
    values = [get_field(row, field) for row in rows]
    values = [float(v) for v in values if v is not None]
    if not values:
        return None
    return sum(values) / len(values)


def screener_summary(rows: Sequence[Any]) -> dict:
    """Headline numbers shown above the screener table."""
    software = [
        (get_field(row, "sector_exposures") or {}).get(SOFTWARE_SECTOR) or 0
        for row in rows
    ]
    return {
        "bdc_count": len(rows),
        "total_aum": sum(get_field(row, "total_fair_value") or 0 for row in rows),
        "avg_dividend_yield": average_metric(rows, "dividend_yield"),
        "avg_price_to_nav": average_metric(rows, "price_to_nav"),
        "avg_non_accrual_pct": average_metric(rows, "non_accrual_pct"),
        "max_software_exposure": max(software) if software else None,
    }


def latest_update(bdcs: Iterable[Any]):
    """Most recent updated_at across BDC records, or None."""
    stamps = [get_field(bdc, "updated_at") for bdc in bdcs]
    stamps = [s for s in stamps if s is not None]
    return max(stamps) if stamps else None
