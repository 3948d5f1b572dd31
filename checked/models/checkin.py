from datetime import datetime, timezone
from sqlalchemy import Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checked.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Checkin(Base):
    __tablename__ = "checkins"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_checkins_rating_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    team_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    person_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Set client-side so the activity timestamp is always UTC.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )

    team: Mapped["Team"] = relationship(back_populates="checkins")
    person: Mapped["Person"] = relationship(back_populates="checkins")
