#!/usr/bin/env python3
"""
Refresh BDC price, dividend yield, NAV and leverage from Yahoo Finance.

Same job as GET /v1/cron/refresh-prices, for running from a shell or a
scheduler.

Usage:
    python scripts/refresh_prices.py
    python scripts/refresh_prices.py --delay 1.0
"""

import argparse

from script_utils import (
    get_db_session,
    print_header,
    print_summary,
    require_database_url,
    run_async,
)

from app.services.price_refresh import STATUS_UPDATED, refresh_prices


async def main(args) -> None:
    print_header("BDC PRICE REFRESH")

    async with get_db_session() as session:
        report = await refresh_prices(session, delay=args.delay)

    for result in report.results:
        if result.status != STATUS_UPDATED:
            print(f"  [{result.status.upper()}] {result.ticker}: {result.message}")

    print_summary(report.summary.model_dump())


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Refresh BDC market data")
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds between Yahoo calls (default: QUOTE_REQUEST_DELAY)",
    )
    args = parser.parse_args()
    require_database_url()
    run_async(main(args))
