from datetime import datetime
from sqlalchemy import Integer, String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checked.db.base import Base


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    people: Mapped[list["Person"]] = relationship(
        back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
    schedule: Mapped["CheckinSchedule"] = relationship(
        back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
    checkins: Mapped[list["Checkin"]] = relationship(
        back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
