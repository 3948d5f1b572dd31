"""
CheckinSchedule: one recurring check-in cadence per team.

`start_date` + `cadence_days` are the ground truth. `next_due` is a display
cache refreshed on schedule edits and new check-ins; readers always
recompute it from the latest check-in instead of trusting this column.
"""
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checked.db.base import Base


class CheckinSchedule(Base):
    __tablename__ = "checkin_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    team_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    cadence_days: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[str | None] = mapped_column(
        String(10), nullable=True,
        comment="Anchor date, YYYY-MM-DD",
    )
    next_due: Mapped[str] = mapped_column(
        String(10), nullable=False,
        comment="Display cache only, YYYY-MM-DD",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    team: Mapped["Team"] = relationship(back_populates="schedule")
