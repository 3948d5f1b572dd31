"""
Team and people schemas.

POST /teams                → TeamCreate   → TeamOut
POST /teams/{id}/people    → PersonCreate → PersonOut
GET  /teams/{id}           → TeamDetailResponse
"""
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from checked.schemas.checkin import CheckinStats, ScheduleOut, TeamCheckinOut
from checked.schemas.common import strip_optional, strip_required


class TeamCreate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=256, examples=["Platform"])]

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return strip_required(v)


class TeamOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    people_count: int = 0
    created_at: Optional[str] = None


class PersonCreate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=256, examples=["Ada Lovelace"])]
    title: Optional[str] = Field(default=None, max_length=256, examples=["Staff Engineer"])

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return strip_required(v)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return strip_optional(v)


class PersonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    name: str
    title: Optional[str] = None
    created_at: Optional[str] = None


class PersonSummary(PersonOut):
    goals_count: int = 0
    projects_count: int = 0
    avg_rating: Optional[float] = Field(
        default=None, description="Mean check-in rating, one decimal."
    )


class TeamDetailResponse(BaseModel):
    team: TeamOut
    people: list[PersonSummary]
    schedule: Optional[ScheduleOut] = None
    due: bool = Field(description="True if the team's check-in is due on the reference date.")
    checkin_stats: CheckinStats
    recent_checkins: list[TeamCheckinOut]
    today: str
