"""
Shared utilities for CLI scripts.

Provides common patterns for:
- Database session management
- CLI argument parsing
- Output formatting
"""

import argparse
import asyncio
import io
import os
import random
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

# Handle Windows UTF-8 output
if sys.platform == 'win32':
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy.ext.asyncio import AsyncSession

from app.services.reference_data import TRACKED_BDCS, BdcReference


# =============================================================================
# DATABASE UTILITIES
# =============================================================================

def require_database_url() -> None:
    """Exit with status 1 when DATABASE_URL is not set."""
    if not os.getenv('DATABASE_URL'):
        print("DATABASE_URL not set (add it to .env)", file=sys.stderr)
        sys.exit(1)


@asynccontextmanager
async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Get an async database session with proper cleanup."""
    from app.core.database import async_session_maker

    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def select_bdcs(ticker: str = None, limit: int = 0) -> list[BdcReference]:
    """Tracked BDCs, optionally narrowed to one ticker or the first N."""
    bdcs = list(TRACKED_BDCS)
    if ticker:
        bdcs = [b for b in bdcs if b.ticker == ticker.upper()]
    if limit > 0:
        bdcs = bdcs[:limit]
    return bdcs


# =============================================================================
# CLI UTILITIES
# =============================================================================

def create_base_parser(description: str) -> argparse.ArgumentParser:
    """Create a base argument parser with common options."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        '--ticker',
        type=str,
        help='Process single BDC by ticker'
    )
    parser.add_argument(
        '--limit',
        type=int,
        default=0,
        help='Limit number of BDCs to process (0 = unlimited)'
    )
    return parser


def add_seed_argument(parser: argparse.ArgumentParser, default: int) -> argparse.ArgumentParser:
    """Add --seed for scripts that generate synthetic values."""
    parser.add_argument(
        '--seed',
        type=int,
        default=default,
        help=f'Random seed for generated values (default: {default})'
    )
    return parser


def make_rng(seed: int) -> random.Random:
    return random.Random(seed)


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def print_header(title: str, width: int = 70) -> None:
    """Print a formatted header."""
    print('=' * width)
    print(title)
    print('=' * width)


def print_summary(stats: dict, width: int = 70) -> None:
    """Print a summary of statistics."""
    print()
    print('=' * width)
    print('SUMMARY')
    print('=' * width)
    for key, value in stats.items():
        print(f"  {key}: {value}")


# =============================================================================
# COMMON PATTERNS
# =============================================================================

def run_async(coro):
    """Run async function with proper event loop handling."""
    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    return asyncio.run(coro)
