"""
BDC Screener Core Utilities
===========================

Shared helpers used by the watchlist, ingestion and refresh services.

CONTENTS
--------
    - JSON parsing from LLM responses
    - Ticker normalization
    - Number parsing for filing text
    - UTC clock

USAGE
-----
    from app.services.utils import (
        parse_json_robust,    # Parse JSON from LLM output
        normalize_ticker,     # " arcc " -> "ARCC"
        parse_amount,         # "1,234.50" -> 1234.5
        utcnow,               # timezone-aware now
    )
"""

import json
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

__all__ = [
    'parse_json_robust',
    'normalize_ticker',
    'clean_tickers',
    'parse_amount',
    'utcnow',
    'MAX_TICKER_LENGTH',
]

MAX_TICKER_LENGTH = 10


# =============================================================================
# JSON PARSING
# =============================================================================

def parse_json_robust(content: str) -> dict:
    """
    Parse JSON from LLM Response
    ============================

    Extracts a JSON object from model output even when the model wraps it in
    markdown fences or surrounds it with prose.

    STEPS
    -----
    1. Try direct json.loads() on the content
    2. Strip ```json fences and retry
    3. Find the outermost {...} span and retry
    4. Remove trailing commas before } or ] and retry

    RAISES
    ------
    ValueError
        If no JSON object can be recovered
    """
    def ensure_dict(result):
        if isinstance(result, dict):
            return result
        if isinstance(result, list) and len(result) >= 1 and isinstance(result[0], dict):
            return result[0]
        raise ValueError(f"Expected dict but got {type(result)}: {str(result)[:200]}")

    if not content:
        raise ValueError("Empty response")

    try:
        return ensure_dict(json.loads(content))
    except json.JSONDecodeError:
        pass

    stripped = re.sub(r'```json\s*', '', content)
    stripped = re.sub(r'```\s*', '', stripped).strip()
    try:
        return ensure_dict(json.loads(stripped))
    except json.JSONDecodeError:
        pass

    json_match = re.search(r'\{[\s\S]*\}', stripped)
    if json_match:
        stripped = json_match.group(0)
        try:
            return ensure_dict(json.loads(stripped))
        except json.JSONDecodeError:
            pass

    cleaned = re.sub(r',(\s*[}\]])', r'\1', stripped)
    try:
        return ensure_dict(json.loads(cleaned))
    except json.JSONDecodeError:
        pass

    raise ValueError(f"Could not parse JSON: {content[:500]}...")


# =============================================================================
# TICKERS
# =============================================================================

def normalize_ticker(ticker: Optional[str]) -> str:
    """Trim and upper-case a ticker. None becomes an empty string."""
    if not ticker:
        return ""
    return ticker.strip().upper()


def clean_tickers(tickers: Iterable[str]) -> list[str]:
    """
    Normalize a batch of tickers, dropping blanks and anything longer than
    MAX_TICKER_LENGTH characters. Order and duplicates are preserved.
    """
    cleaned = []
    for ticker in tickers:
        normalized = normalize_ticker(ticker if isinstance(ticker, str) else None)
        if 0 < len(normalized) <= MAX_TICKER_LENGTH:
            cleaned.append(normalized)
    return cleaned


# =============================================================================
# NUMBERS
# =============================================================================

def parse_amount(value: Optional[str]) -> Optional[float]:
    """
    Parse a number as printed in a filing table.

    Handles thousands separators, leading "$" and surrounding whitespace.
    Returns None when nothing numeric is left.

        parse_amount("$ 1,250,000") -> 1250000.0
        parse_amount("n/a")         -> None
    """
    if value is None:
        return None
    cleaned = value.replace(',', '').replace('$', '').strip()
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


# =============================================================================
# TIMESTAMPS
# =============================================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)
