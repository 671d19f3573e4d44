"""create_activity_readings_table

Revision ID: 4f1a9c2e7b30
Revises:
Create Date: 2026-03-10 09:15:12.318204

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "4f1a9c2e7b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "activity_readings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "activity",
            sa.String(length=200),
            nullable=False,
            comment="Activity name as reported (e.g., 'Electricity Consumption')",
        ),
        sa.Column("year", sa.Integer(), nullable=False, comment="Reporting year"),
        sa.Column(
            "month",
            sa.String(length=3),
            nullable=True,
            comment="Abbreviated month name (Jan..Dec)",
        ),
        sa.Column(
            "month_index",
            sa.Integer(),
            nullable=True,
            comment="Calendar position of month (1-12) for range filters and ordering",
        ),
        sa.Column(
            "value",
            sa.Numeric(precision=14, scale=4),
            nullable=False,
            comment="Raw quantity in the activity's native unit",
        ),
        sa.Column(
            "source_file",
            sa.String(length=255),
            nullable=True,
            comment="Original CSV filename if imported from file",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        comment="Raw activity consumption readings",
    )
    op.create_index(
        op.f("ix_activity_readings_activity"),
        "activity_readings",
        ["activity"],
        unique=False,
    )
    op.create_index(
        op.f("ix_activity_readings_year"),
        "activity_readings",
        ["year"],
        unique=False,
    )
    op.create_index(
        "ix_activity_readings_year_month",
        "activity_readings",
        ["year", "month_index"],
        unique=False,
    )
    op.create_index(
        "ix_activity_readings_activity_year",
        "activity_readings",
        ["activity", "year"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_activity_readings_activity_year", table_name="activity_readings")
    op.drop_index("ix_activity_readings_year_month", table_name="activity_readings")
    op.drop_index(op.f("ix_activity_readings_year"), table_name="activity_readings")
    op.drop_index(op.f("ix_activity_readings_activity"), table_name="activity_readings")
    op.drop_table("activity_readings")
