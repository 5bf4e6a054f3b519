#!/usr/bin/env python3
"""
Load financial metrics for every BDC in the database.

Tickers with curated metrics get those; the rest get generated defaults
(seeded, so --seed reproduces a run).

Usage:
    python scripts/import_financial_metrics.py
    python scripts/import_financial_metrics.py --seed 7
"""

import argparse

from script_utils import (
    add_seed_argument,
    get_db_session,
    make_rng,
    print_header,
    print_summary,
    require_database_url,
    run_async,
)

from app.services.ingestion import DEFAULT_SEED, import_financial_metrics


async def main(args) -> None:
    print_header("BDC FINANCIAL METRICS IMPORT")

    async with get_db_session() as session:
        stats = await import_financial_metrics(session, make_rng(args.seed))

    print_summary(stats)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import BDC financial metrics")
    add_seed_argument(parser, DEFAULT_SEED)
    args = parser.parse_args()
    require_database_url()
    run_async(main(args))
