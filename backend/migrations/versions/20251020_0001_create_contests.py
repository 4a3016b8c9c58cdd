from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20251020_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "contests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("starts_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("ends_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="draft"),
        sa.Column("num_winners", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("min_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prize_per_winner", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prize_titles", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("ends_at > starts_at", name="ck_contest_window_order"),
        sa.CheckConstraint("status IN ('draft','active','ended','archived')", name="ck_contest_status"),
    )

def downgrade() -> None:
    op.drop_table("contests")
