"""create rate_locks table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # No unique constraint on (user_id, pair): uniqueness of the active
    # lock is checked by the service before insert.
    op.create_table(
        "rate_locks",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("pair", sa.String(32), nullable=False),
        sa.Column("locked_rate", sa.Numeric(18, 8), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )
    op.create_index("ix_rate_locks_user_id_pair", "rate_locks", ["user_id", "pair"])
    op.create_index("ix_rate_locks_expires_at", "rate_locks", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_rate_locks_expires_at", table_name="rate_locks")
    op.drop_index("ix_rate_locks_user_id_pair", table_name="rate_locks")
    op.drop_table("rate_locks")
