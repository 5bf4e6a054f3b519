"""Add financial metrics columns to bdcs

Revision ID: 002_add_financial_metrics
Revises: 001_initial_schema
Create Date: 2026-02-03

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002_add_financial_metrics"
down_revision: Union[str, None] = "001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

METRIC_COLUMNS = [
    ("dividend_yield", "Current annual dividend yield as percentage"),
    ("dividend_growth_3yr", "3-year compound annual dividend growth rate"),
    ("nav_per_share", "Net Asset Value per share"),
    ("price", "Current stock price"),
    ("price_to_nav", "Price to NAV ratio (premium/discount)"),
    ("non_accrual_pct", "Non-accrual loans as percentage of portfolio at fair value"),
    ("total_assets", "Total assets under management"),
    ("debt_to_equity", "Debt to equity ratio"),
    ("net_investment_income_yield", "Net investment income yield"),
]


def upgrade() -> None:
    for name, comment in METRIC_COLUMNS:
        op.add_column("bdcs", sa.Column(name, sa.Numeric, comment=comment))

    op.add_column(
        "bdcs",
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_column("bdcs", "updated_at")
    for name, _ in reversed(METRIC_COLUMNS):
        op.drop_column("bdcs", name)
