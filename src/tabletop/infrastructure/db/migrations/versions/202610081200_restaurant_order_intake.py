"""restaurant order intake columns

Revision ID: 202610081200
Revises: 202610010900
Create Date: 2026-10-08 12:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610081200"
down_revision = "202610010900"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "restaurants",
        sa.Column(
            "is_accepting_orders",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
    )
    op.add_column("restaurants", sa.Column("service_hours", sa.JSON(), nullable=True))
    op.add_column(
        "restaurants",
        sa.Column("offline_notice", sa.String(length=500), nullable=True),
    )


def downgrade() -> None:
    op.drop_column("restaurants", "offline_notice")
    op.drop_column("restaurants", "service_hours")
    op.drop_column("restaurants", "is_accepting_orders")
