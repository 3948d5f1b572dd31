"""add checkin_schedules.start_date

Revision ID: 0002
Revises: 0001
Create Date: 2026-03-09

Schedules become anchored: due dates fall on start_date + n * cadence_days.
Existing rows are backfilled from their cached next_due, which was the only
anchor they had.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("checkin_schedules") as batch:
        batch.add_column(sa.Column("start_date", sa.String(10), nullable=True))
    op.execute(
        "UPDATE checkin_schedules "
        "SET start_date = COALESCE(start_date, next_due) "
        "WHERE start_date IS NULL OR start_date = ''"
    )


def downgrade() -> None:
    with op.batch_alter_table("checkin_schedules") as batch:
        batch.drop_column("start_date")
