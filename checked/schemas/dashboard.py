from pydantic import BaseModel

from checked.schemas.checkin import ScheduledTeamOut
from checked.schemas.team import TeamOut


class Counts(BaseModel):
    teams: int
    people: int
    goals: int
    projects: int


class DashboardResponse(BaseModel):
    today: str
    stats: Counts
    teams: list[TeamOut]
    due_checkins: list[ScheduledTeamOut]
