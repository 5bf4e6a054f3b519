#!/usr/bin/env python3
"""
Import BDCs and their holdings.

Upserts the selected BDCs, then pulls each one's latest 10-K/10-Q from
SEC EDGAR and replaces its holdings with what the heuristic parser finds.
On a full run, if fewer than 5 BDCs parse, representative holdings
(period 2025-09-30, source=representative) are loaded instead.

Usage:
    python scripts/import_sec_data.py
    python scripts/import_sec_data.py --ticker ARCC      # only ARCC, no representative fallback
    python scripts/import_sec_data.py --limit 3          # first 3 BDCs, no representative fallback
    python scripts/import_sec_data.py --representative-only --seed 7
"""

from script_utils import (
    add_seed_argument,
    create_base_parser,
    get_db_session,
    make_rng,
    print_header,
    print_summary,
    require_database_url,
    run_async,
    select_bdcs,
)

from app.services.ingestion import (
    DEFAULT_SEED,
    import_bdcs,
    import_holdings_from_sec,
    import_representative_data,
)
from app.services.sec_client import SECEdgarClient


async def main(args) -> None:
    rng = make_rng(args.seed)
    bdcs = select_bdcs(args.ticker, args.limit)
    if not bdcs:
        print(f"BDC not tracked: {args.ticker}")
        return

    print_header("BDC DATA IMPORT")

    async with get_db_session() as session:
        if args.representative_only:
            # Representative data covers every tracked BDC
            print(f"Upserted {await import_bdcs(session)} BDCs")
            holdings = await import_representative_data(session, rng)
            print_summary({"representative_holdings": holdings})
            return

        print(f"Upserted {await import_bdcs(session, bdcs)} BDCs")

        edgar = SECEdgarClient()
        try:
            stats = await import_holdings_from_sec(
                session, edgar, rng, bdcs=bdcs, allow_fallback=not (args.no_fallback or args.ticker or args.limit)
            )
        finally:
            await edgar.close()

    for failure in stats.failures:
        print(f"  [FAIL] {failure['ticker']}: {failure['error']}")

    print_summary({
        "bdcs_processed": stats.bdcs_processed,
        "bdcs_imported": stats.bdcs_imported,
        "holdings_imported": stats.holdings_imported,
        "used_representative": stats.used_representative,
        "failures": len(stats.failures),
    })


if __name__ == "__main__":
    parser = create_base_parser("Import BDC holdings from SEC EDGAR")
    add_seed_argument(parser, DEFAULT_SEED)
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Never load representative holdings",
    )
    parser.add_argument(
        "--representative-only",
        action="store_true",
        help="Skip EDGAR and load representative holdings",
    )
    args = parser.parse_args()
    require_database_url()
    run_async(main(args))
