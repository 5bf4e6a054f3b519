"""Initial schema - tracked BDCs and portfolio holdings

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-02-03

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # bdcs
    op.create_table(
        "bdcs",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("cik", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("ticker", sa.String(20)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("cik"),
    )
    op.create_index("idx_bdcs_ticker", "bdcs", ["ticker"])

    # holdings (one row per portfolio company per reporting period)
    op.create_table(
        "holdings",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("bdc_cik", sa.String(20), nullable=False),
        sa.Column("period_date", sa.Date, nullable=False),
        sa.Column("company_name", sa.Text, nullable=False),
        sa.Column("industry_raw", sa.Text),
        sa.Column("industry_sector", sa.String(50)),
        sa.Column("fair_value", sa.Numeric),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_holdings_bdc_cik", "holdings", ["bdc_cik"])
    op.create_index("idx_holdings_bdc_period", "holdings", ["bdc_cik", "period_date"])
    op.create_index("idx_holdings_sector", "holdings", ["industry_sector"])


def downgrade() -> None:
    op.drop_index("idx_holdings_sector", table_name="holdings")
    op.drop_index("idx_holdings_bdc_period", table_name="holdings")
    op.drop_index("idx_holdings_bdc_cik", table_name="holdings")
    op.drop_table("holdings")

    op.drop_index("idx_bdcs_ticker", table_name="bdcs")
    op.drop_table("bdcs")
