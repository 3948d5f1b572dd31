"""
Check-in and schedule schemas.

PUT  /teams/{id}/schedule   → ScheduleRequest → ScheduleOut
POST /teams/{id}/checkins   → TeamCheckinCreate → CheckinCreated
POST /people/{id}/checkins  → CheckinCreate → CheckinCreated
GET  /checkins              → CheckinsOverviewResponse
"""
from datetime import date
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from checked.schemas.common import strip_optional


class ScheduleRequest(BaseModel):
    cadence_days: Annotated[int, Field(
        ge=1,
        le=3650,
        description="Length of the check-in cadence in days.",
        examples=[7, 14],
    )]
    start_date: Optional[date] = Field(
        default=None,
        description="Anchor date (YYYY-MM-DD). Defaults to today.",
        examples=["2026-01-05"],
    )


class ScheduleOut(BaseModel):
    """Stored cadence plus the schedule recomputed on this read."""
    id: int
    team_id: int
    cadence_days: int
    start_date: str
    next_due: str = Field(description="Next date on the cadence grid after the last check-in.")
    missed_count: int = Field(description="Whole cadence periods elapsed since next_due.")
    due: bool
    created_at: Optional[str] = None


class CheckinCreate(BaseModel):
    rating: Annotated[int, Field(ge=1, le=5, description="1 (rough) to 5 (great).")]
    notes: Optional[str] = Field(default=None, max_length=10_000)

    @field_validator("notes", mode="before")
    @classmethod
    def strip_notes(cls, v):
        return strip_optional(v)


class TeamCheckinCreate(CheckinCreate):
    person_id: int


class CheckinOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    person_id: int
    rating: int
    notes: Optional[str] = None
    created_at: Optional[str] = None


class TeamCheckinOut(CheckinOut):
    person_name: str


class CheckinCreated(CheckinOut):
    next_due: Optional[str] = Field(
        default=None,
        description="Team's next due date after this check-in; null without a schedule.",
    )


class CheckinStats(BaseModel):
    total_checkins: int
    average_rating: Optional[float] = None


class ScheduledTeamOut(BaseModel):
    team_id: int
    team_name: str
    start_date: str
    cadence_days: int
    people_count: int
    last_checkin_at: Optional[str] = None
    next_due: str
    missed_count: int


class CheckinsOverviewResponse(BaseModel):
    today: str
    due_checkins: list[ScheduledTeamOut]
    upcoming_checkins: list[ScheduledTeamOut]
