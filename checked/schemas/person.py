"""
Person detail, goal and project schemas.
"""
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from checked.schemas.checkin import CheckinOut, ScheduleOut
from checked.schemas.common import strip_required


class PersonDetail(BaseModel):
    id: int
    team_id: int
    team_name: str
    name: str
    title: Optional[str] = None
    created_at: Optional[str] = None


class GoalCreate(BaseModel):
    goal: Annotated[str, Field(min_length=1, max_length=10_000)]
    expectation: Annotated[str, Field(min_length=1, max_length=10_000)]

    @field_validator("goal", "expectation", mode="before")
    @classmethod
    def strip_text(cls, v):
        return strip_required(v)


class GoalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    person_id: int
    goal: str
    expectation: str
    created_at: Optional[str] = None


class ProjectCreate(BaseModel):
    project: Annotated[str, Field(min_length=1, max_length=10_000)]
    expectation: Annotated[str, Field(min_length=1, max_length=10_000)]

    @field_validator("project", "expectation", mode="before")
    @classmethod
    def strip_text(cls, v):
        return strip_required(v)


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    person_id: int
    project: str
    expectation: str
    created_at: Optional[str] = None


class PersonDetailResponse(BaseModel):
    person: PersonDetail
    goals: list[GoalOut]
    projects: list[ProjectOut]
    checkins: list[CheckinOut]
    team_schedule: Optional[ScheduleOut] = None
    team_due: bool
    today: str
