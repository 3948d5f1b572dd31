from .team import Team
from .person import Person
from .goal import Goal
from .project import Project
from .checkin_schedule import CheckinSchedule
from .checkin import Checkin

__all__ = [
    "Team",
    "Person",
    "Goal",
    "Project",
    "CheckinSchedule",
    "Checkin",
]
