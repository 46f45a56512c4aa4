"""Add organizations.settings (per-org feature flags)

Revision ID: 8c3f61d2a7e0
Revises: 5e0c2a7d9b41
Create Date: 2026-10-18 12:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c3f61d2a7e0"
down_revision: str | Sequence[str] | None = "5e0c2a7d9b41"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add the nullable settings column; existing orgs keep every feature."""
    op.add_column(
        "organizations",
        sa.Column("settings", postgresql.JSONB(), nullable=True),
    )


def downgrade() -> None:
    op.drop_column("organizations", "settings")
