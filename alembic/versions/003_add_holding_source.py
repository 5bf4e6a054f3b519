"""Add source column to holdings (sec_filing or representative)

Revision ID: 003_add_holding_source
Revises: 002_add_financial_metrics
Create Date: 2026-02-10

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "003_add_holding_source"
down_revision: Union[str, None] = "002_add_financial_metrics"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing rows predate the column; they came from filings or the
    # fallback alike, so they are left as sec_filing until re-imported
    op.add_column(
        "holdings",
        sa.Column("source", sa.String(20), nullable=False, server_default="sec_filing"),
    )


def downgrade() -> None:
    op.drop_column("holdings", "source")
