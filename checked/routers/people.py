"""
People router.

GET  /people/{person_id}
POST /people/{person_id}/goals
POST /people/{person_id}/projects
POST /people/{person_id}/checkins
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from starlette import status

from checked.db.base import get_db
from checked.models.checkin import Checkin
from checked.models.goal import Goal
from checked.models.project import Project
from checked.schemas.checkin import CheckinCreate, CheckinCreated, CheckinOut, ScheduleOut
from checked.schemas.common import ErrorResponse
from checked.schemas.person import (
    GoalCreate,
    GoalOut,
    PersonDetail,
    PersonDetailResponse,
    ProjectCreate,
    ProjectOut,
)
from checked.services import checkins as checkin_service
from checked.services import teams as team_service
from checked.services.scheduler import normalize_date

router = APIRouter(prefix="/people", tags=["people"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _goal_to_response(g: Goal) -> GoalOut:
    return GoalOut(
        id=g.id,
        person_id=g.person_id,
        goal=g.goal,
        expectation=g.expectation,
        created_at=_iso(g.created_at),
    )


def _project_to_response(p: Project) -> ProjectOut:
    return ProjectOut(
        id=p.id,
        person_id=p.person_id,
        project=p.project,
        expectation=p.expectation,
        created_at=_iso(p.created_at),
    )


def _checkin_to_response(c: Checkin) -> CheckinOut:
    return CheckinOut(
        id=c.id,
        team_id=c.team_id,
        person_id=c.person_id,
        rating=c.rating,
        notes=c.notes,
        created_at=_iso(c.created_at),
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get(
    "/{person_id}",
    response_model=PersonDetailResponse,
    summary="Person detail with goals, projects and recent check-ins",
    responses={404: {"model": ErrorResponse, "description": "Person not found."}},
)
def person_detail(
    person_id: int,
    reference_date: Optional[date] = Query(
        default=None,
        description="ISO date the team schedule is evaluated against. Defaults to today.",
    ),
    db: Session = Depends(get_db),
):
    person = team_service.get_person_detail(db, person_id)
    reference = normalize_date(reference_date)
    schedule = checkin_service.get_schedule(db, person["team_id"], reference)
    return PersonDetailResponse(
        person=PersonDetail(**person),
        goals=[_goal_to_response(g) for g in team_service.list_goals(db, person_id)],
        projects=[_project_to_response(p) for p in team_service.list_projects(db, person_id)],
        checkins=[_checkin_to_response(c) for c in checkin_service.list_checkins(db, person_id)],
        team_schedule=ScheduleOut(**schedule) if schedule else None,
        team_due=bool(schedule and schedule["due"]),
        today=reference,
    )


@router.post(
    "/{person_id}/goals",
    response_model=GoalOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a goal",
    responses={404: {"model": ErrorResponse, "description": "Person not found."}},
)
def add_goal(person_id: int, payload: GoalCreate, db: Session = Depends(get_db)):
    goal = team_service.create_goal(db, person_id, payload.goal, payload.expectation)
    return _goal_to_response(goal)


@router.post(
    "/{person_id}/projects",
    response_model=ProjectOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a project",
    responses={404: {"model": ErrorResponse, "description": "Person not found."}},
)
def add_project(person_id: int, payload: ProjectCreate, db: Session = Depends(get_db)):
    project = team_service.create_project(db, person_id, payload.project, payload.expectation)
    return _project_to_response(project)


@router.post(
    "/{person_id}/checkins",
    response_model=CheckinCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Record a check-in on the person's team",
    responses={404: {"model": ErrorResponse, "description": "Person not found."}},
)
def add_checkin(person_id: int, payload: CheckinCreate, db: Session = Depends(get_db)):
    person = team_service.get_person(db, person_id)
    created = checkin_service.create_checkin(
        db, person.team_id, person_id, payload.rating, payload.notes
    )
    return CheckinCreated(**created)
