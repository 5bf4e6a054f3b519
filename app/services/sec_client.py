"""
SEC EDGAR Client
================

Direct EDGAR access for the holdings import.

CONTENTS
--------
- SECEdgarClient: rate-limited submissions lookup and document download
- FilingInfo: Pydantic model for filing metadata
- parse_filing_for_holdings: heuristic Schedule of Investments parser

USAGE
-----
    from app.services.sec_client import SECEdgarClient, parse_filing_for_holdings

    edgar = SECEdgarClient()
    filing = await edgar.get_latest_filing("0001287750")
    if filing:
        html = await edgar.download_filing("0001287750", filing)
        holdings = parse_filing_for_holdings(html)
    await edgar.close()

Note: EDGAR allows 10 requests/second. The client waits at least
settings.sec_request_interval (0.12s) between requests.
"""

import asyncio
import re
import time
from typing import Optional

import httpx
from pydantic import BaseModel

from app.core.config import get_settings
from app.services.utils import parse_amount

LATEST_FORM_TYPES = ("10-K", "10-Q")

MAX_COMPANY_NAME_LENGTH = 200
MAX_INDUSTRY_LENGTH = 100

# Company, industry and fair value cells appearing in that order. Real
# schedules of investments vary a lot; this catches only tagged tables.
HOLDING_PATTERN = re.compile(
    r"(?:name|company|issuer)[^>]*>([^<]{5,100})<.*?"
    r"(?:industry|sector)[^>]*>([^<]+)<.*?"
    r"(?:fair.?value|amount)[^>]*>[\s$]*([0-9,.]+)",
    re.IGNORECASE | re.DOTALL,
)


class FilingInfo(BaseModel):
    """Metadata for a single SEC filing."""
    form_type: str
    filing_date: str
    accession_number: str
    primary_document: str


class ParsedHolding(BaseModel):
    """One holding line recovered from a filing."""
    company_name: str
    industry_raw: Optional[str] = None
    fair_value: float


def parse_filing_for_holdings(html: str) -> list[ParsedHolding]:
    """
    Pull (company, industry, fair value) triples out of filing HTML.

    Names are trimmed and truncated (200 / 100 chars). Rows without a
    positive fair value are dropped.
    """
    holdings = []
    for company, industry, value in HOLDING_PATTERN.findall(html or ""):
        fair_value = parse_amount(value)
        company = company.strip()
        industry = industry.strip()
        if not fair_value or fair_value <= 0 or not company or not industry:
            continue
        holdings.append(ParsedHolding(
            company_name=company[:MAX_COMPANY_NAME_LENGTH],
            industry_raw=industry[:MAX_INDUSTRY_LENGTH],
            fair_value=fair_value,
        ))
    return holdings


def latest_filing_from_submissions(
    submissions: dict,
    form_types: tuple[str, ...] = LATEST_FORM_TYPES,
) -> Optional[FilingInfo]:
    """First filing of the given forms in EDGAR's recent list (newest first)."""
    recent = (submissions.get("filings") or {}).get("recent")
    if not recent:
        return None

    for i, form in enumerate(recent.get("form", [])):
        if form in form_types:
            return FilingInfo(
                form_type=form,
                filing_date=recent["filingDate"][i],
                accession_number=recent["accessionNumber"][i],
                primary_document=recent["primaryDocument"][i],
            )
    return None


class SECEdgarClient:
    """
    Client for fetching filings directly from SEC EDGAR.

    USAGE
    -----
        edgar = SECEdgarClient()
        filing = await edgar.get_latest_filing(cik="0001287750")
        await edgar.close()
    """

    BASE_URL = "https://data.sec.gov"
    ARCHIVES_URL = "https://www.sec.gov/Archives/edgar/data"

    def __init__(self, user_agent: Optional[str] = None, min_interval: Optional[float] = None):
        settings = get_settings()
        self.min_interval = settings.sec_request_interval if min_interval is None else min_interval
        self.client = httpx.AsyncClient(
            headers={
                "User-Agent": user_agent or settings.sec_user_agent,
                "Accept": "application/json,text/html",
            },
            timeout=60.0,
            follow_redirects=True,
        )
        self._last_request = 0.0
        self._lock = asyncio.Lock()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def _get(self, url: str) -> httpx.Response:
        async with self._lock:
            elapsed = time.monotonic() - self._last_request
            if elapsed < self.min_interval:
                await asyncio.sleep(self.min_interval - elapsed)
            self._last_request = time.monotonic()
            response = await self.client.get(url)
        response.raise_for_status()
        return response

    async def get_company_filings(self, cik: str) -> dict:
        """Get list of filings for a company by CIK."""
        cik_padded = cik.lstrip("0").zfill(10)
        response = await self._get(f"{self.BASE_URL}/submissions/CIK{cik_padded}.json")
        return response.json()

    async def get_latest_filing(
        self,
        cik: str,
        form_types: tuple[str, ...] = LATEST_FORM_TYPES,
    ) -> Optional[FilingInfo]:
        """Most recent 10-K or 10-Q, or None when the BDC has filed neither."""
        return latest_filing_from_submissions(await self.get_company_filings(cik), form_types)

    async def download_filing(self, cik: str, filing: FilingInfo) -> str:
        """Download a single filing's primary document."""
        accession_no_dashes = filing.accession_number.replace("-", "")
        doc_url = f"{self.ARCHIVES_URL}/{cik.lstrip('0')}/{accession_no_dashes}/{filing.primary_document}"
        response = await self._get(doc_url)
        return response.text
