"""Create learned_mappings table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "learned_mappings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("channel", sa.String(50), nullable=False),
        sa.Column("raw_label", sa.Text(), nullable=False),
        sa.Column("master_id", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # One mapping per label within a channel
    op.create_index(
        "idx_learned_channel_label",
        "learned_mappings",
        ["channel", "raw_label"],
        unique=True,
    )
    op.create_index("idx_learned_master", "learned_mappings", ["master_id"])


def downgrade() -> None:
    op.drop_index("idx_learned_master", table_name="learned_mappings")
    op.drop_index("idx_learned_channel_label", table_name="learned_mappings")
    op.drop_table("learned_mappings")
