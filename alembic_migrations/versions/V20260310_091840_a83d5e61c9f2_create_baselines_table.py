"""create_baselines_table

Revision ID: a83d5e61c9f2
Revises: 4f1a9c2e7b30
Create Date: 2026-03-10 09:18:40.772915

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a83d5e61c9f2"
down_revision = "4f1a9c2e7b30"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "baselines",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "activity_name",
            sa.String(length=200),
            nullable=False,
            comment="Activity name as entered by the operator",
        ),
        sa.Column(
            "activity_key",
            sa.String(length=200),
            nullable=False,
            comment="Normalized activity name (trimmed, lower-cased)",
        ),
        sa.Column("year", sa.Integer(), nullable=False, comment="Baseline year"),
        sa.Column(
            "value",
            sa.Numeric(precision=15, scale=4),
            nullable=False,
            comment="Baseline emission value",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("activity_key", "year", name="uq_baselines_activity_key_year"),
        comment="Baseline values per activity and year",
    )
    op.create_index(
        op.f("ix_baselines_activity_key"),
        "baselines",
        ["activity_key"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_baselines_activity_key"), table_name="baselines")
    op.drop_table("baselines")
