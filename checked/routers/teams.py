"""
Teams router.

GET    /teams
POST   /teams
GET    /teams/{team_id}
DELETE /teams/{team_id}
POST   /teams/{team_id}/people
PUT    /teams/{team_id}/schedule
POST   /teams/{team_id}/checkins
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from starlette import status

from checked.db.base import get_db
from checked.schemas.checkin import (
    CheckinCreated,
    CheckinStats,
    ScheduleOut,
    ScheduleRequest,
    TeamCheckinCreate,
    TeamCheckinOut,
)
from checked.schemas.common import ErrorResponse
from checked.schemas.team import (
    PersonCreate,
    PersonOut,
    PersonSummary,
    TeamCreate,
    TeamDetailResponse,
    TeamOut,
)
from checked.services import checkins as checkin_service
from checked.services import teams as team_service
from checked.services.scheduler import normalize_date

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=list[TeamOut], summary="List teams")
def list_teams(db: Session = Depends(get_db)):
    """All teams ordered by name with their head count."""
    return team_service.list_teams(db)


@router.post(
    "",
    response_model=TeamOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a team",
)
def create_team(payload: TeamCreate, db: Session = Depends(get_db)):
    team = team_service.create_team(db, payload.name)
    return TeamOut(
        id=team.id,
        name=team.name,
        people_count=0,
        created_at=team.created_at.isoformat() if team.created_at else None,
    )


@router.get(
    "/{team_id}",
    response_model=TeamDetailResponse,
    summary="Team detail with schedule",
    responses={404: {"model": ErrorResponse, "description": "Team not found."}},
)
def team_detail(
    team_id: int,
    reference_date: Optional[date] = Query(
        default=None,
        description="ISO date the schedule is evaluated against. Defaults to today.",
        examples=["2026-02-20"],
    ),
    db: Session = Depends(get_db),
):
    """
    Return the team, its people, its check-in schedule and recent check-ins.

    `schedule.next_due` and `schedule.missed_count` are recomputed from the
    latest check-in on every request.
    """
    team = team_service.get_team(db, team_id)
    reference = normalize_date(reference_date)
    schedule = checkin_service.get_schedule(db, team_id, reference)
    return TeamDetailResponse(
        team=TeamOut(
            id=team.id,
            name=team.name,
            people_count=len(team.people),
            created_at=team.created_at.isoformat() if team.created_at else None,
        ),
        people=[PersonSummary(**p) for p in team_service.list_people_by_team(db, team_id)],
        schedule=ScheduleOut(**schedule) if schedule else None,
        due=bool(schedule and schedule["due"]),
        checkin_stats=CheckinStats(**checkin_service.get_team_checkin_stats(db, team_id)),
        recent_checkins=[
            TeamCheckinOut(**c) for c in checkin_service.list_team_checkins(db, team_id)
        ],
        today=reference,
    )


@router.delete(
    "/{team_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a team and everything under it",
    responses={404: {"model": ErrorResponse, "description": "Team not found."}},
)
def delete_team(team_id: int, db: Session = Depends(get_db)):
    team_service.delete_team(db, team_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{team_id}/people",
    response_model=PersonOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a person to a team",
    responses={404: {"model": ErrorResponse, "description": "Team not found."}},
)
def add_person(team_id: int, payload: PersonCreate, db: Session = Depends(get_db)):
    person = team_service.create_person(db, team_id, payload.name, payload.title)
    return PersonOut(
        id=person.id,
        team_id=person.team_id,
        name=person.name,
        title=person.title,
        created_at=person.created_at.isoformat() if person.created_at else None,
    )


@router.put(
    "/{team_id}/schedule",
    response_model=ScheduleOut,
    summary="Create or update the team's check-in cadence",
    responses={
        404: {"description": "Team not found."},
        422: {"description": "cadence_days must be a positive integer."},
    },
)
def put_schedule(team_id: int, payload: ScheduleRequest, db: Session = Depends(get_db)):
    """
    Set `cadence_days` and the anchor `start_date` (defaults to today).
    Due dates fall on `start_date + n * cadence_days`.
    """
    schedule = checkin_service.upsert_schedule(
        db, team_id, payload.cadence_days, payload.start_date
    )
    return ScheduleOut(**schedule)


@router.post(
    "/{team_id}/checkins",
    response_model=CheckinCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Record a check-in for a team member",
    responses={
        404: {"description": "Team or person not found."},
        422: {"description": "Person is not on this team."},
    },
)
def add_team_checkin(team_id: int, payload: TeamCheckinCreate, db: Session = Depends(get_db)):
    created = checkin_service.create_checkin(
        db, team_id, payload.person_id, payload.rating, payload.notes
    )
    return CheckinCreated(**created)
