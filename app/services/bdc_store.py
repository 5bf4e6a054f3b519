"""
BDC Store

Record access for BDCs and holdings. Everything that touches the bdcs and
holdings tables goes through here so the aggregation code stays pure.

Holdings are replaced wholesale per BDC: delete_holdings_for_bdc() then
insert_holdings(). The two steps are not one transaction; a crash between
them leaves the BDC with no holdings, which reads as "no data" afterwards.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Bdc, Holding
from app.services.utils import utcnow


async def fetch_all_bdcs(session: AsyncSession) -> list[Bdc]:
    result = await session.execute(select(Bdc).order_by(Bdc.name))
    return list(result.scalars().all())


async def fetch_bdc(session: AsyncSession, cik: str) -> Optional[Bdc]:
    """Get one BDC by CIK, or None."""
    result = await session.execute(select(Bdc).where(Bdc.cik == cik))
    return result.scalar_one_or_none()


async def fetch_bdcs_with_tickers(session: AsyncSession) -> list[Bdc]:
    """BDCs that trade, i.e. the ones the price refresh can look up."""
    result = await session.execute(
        select(Bdc).where(Bdc.ticker.isnot(None)).order_by(Bdc.ticker)
    )
    return list(result.scalars().all())


async def fetch_holdings_for_bdc(session: AsyncSession, cik: str) -> list[Holding]:
    """All holdings for a BDC, newest period first."""
    result = await session.execute(
        select(Holding)
        .where(Holding.bdc_cik == cik)
        .order_by(Holding.period_date.desc())
    )
    return list(result.scalars().all())


async def fetch_holdings_by_cik(session: AsyncSession) -> dict[str, list[Holding]]:
    """All holdings grouped by BDC CIK, newest period first within each group."""
    result = await session.execute(
        select(Holding).order_by(Holding.bdc_cik, Holding.period_date.desc())
    )
    grouped: dict[str, list[Holding]] = {}
    for holding in result.scalars().all():
        grouped.setdefault(holding.bdc_cik, []).append(holding)
    return grouped


async def upsert_bdcs(session: AsyncSession, records: list[dict]) -> int:
    """
    Insert BDCs or update name/ticker for existing CIKs.

    Uses PostgreSQL ON CONFLICT (cik). Metrics are not touched.
    """
    if not records:
        return 0

    stmt = insert(Bdc).values(records)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Bdc.cik],
        set_={
            "name": stmt.excluded.name,
            "ticker": stmt.excluded.ticker,
        },
    )
    await session.execute(stmt)
    await session.commit()
    return len(records)


async def update_bdc_fields(session: AsyncSession, cik: str, fields: dict[str, Any]) -> None:
    """Write the given columns for one BDC."""
    await session.execute(update(Bdc).where(Bdc.cik == cik).values(**fields))
    await session.commit()


async def delete_holdings_for_bdc(session: AsyncSession, cik: str) -> None:
    await session.execute(delete(Holding).where(Holding.bdc_cik == cik))
    await session.commit()


async def insert_holdings(session: AsyncSession, records: list[dict]) -> int:
    """
    Insert holding rows. period_date may be an ISO string or a date.
    """
    if not records:
        return 0

    rows = []
    for record in records:
        row = dict(record)
        if isinstance(row.get("period_date"), str):
            row["period_date"] = date.fromisoformat(row["period_date"])
        rows.append(Holding(**row))

    session.add_all(rows)
    await session.commit()
    return len(rows)


async def replace_holdings(session: AsyncSession, cik: str, records: list[dict]) -> int:
    """Delete then insert: a BDC never keeps holdings from a previous import."""
    await delete_holdings_for_bdc(session, cik)
    return await insert_holdings(session, records)


def touch(fields: dict[str, Any]) -> dict[str, Any]:
    """Stamp an update dict with updated_at."""
    return {**fields, "updated_at": utcnow()}
