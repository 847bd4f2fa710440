"""create contact rate limit hits table

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "contact_rate_limit_hits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_contact_rate_limit_hits_key_created_at",
        "contact_rate_limit_hits",
        ["key", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_contact_rate_limit_hits_key_created_at", table_name="contact_rate_limit_hits")
    op.drop_table("contact_rate_limit_hits")
