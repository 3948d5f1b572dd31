"""
Check-ins router: due and upcoming team check-ins.

GET /checkins
GET /dashboard
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from checked.core.config import settings
from checked.db.base import get_db
from checked.schemas.checkin import CheckinsOverviewResponse, ScheduledTeamOut
from checked.schemas.dashboard import Counts, DashboardResponse
from checked.schemas.team import TeamOut
from checked.services import checkins as checkin_service
from checked.services import teams as team_service
from checked.services.scheduler import normalize_date

router = APIRouter(tags=["checkins"])


@router.get(
    "/checkins",
    response_model=CheckinsOverviewResponse,
    summary="Due and upcoming team check-ins",
)
def checkins_overview(
    reference_date: Optional[date] = Query(
        default=None,
        description="ISO date treated as today. Defaults to the server's local date.",
        examples=["2026-02-20"],
    ),
    limit: int = Query(
        default=settings.UPCOMING_LIMIT,
        ge=0,
        le=100,
        description="Maximum number of upcoming check-ins.",
    ),
    db: Session = Depends(get_db),
):
    """
    - **due_checkins**: every scheduled team whose next due date is on or
      before the reference date, oldest first, with `missed_count`.
    - **upcoming_checkins**: the next `limit` teams due after the reference
      date, soonest first.
    """
    reference = normalize_date(reference_date)
    return CheckinsOverviewResponse(
        today=reference,
        due_checkins=[
            ScheduledTeamOut(**t) for t in checkin_service.list_due_checkins(db, reference)
        ],
        upcoming_checkins=[
            ScheduledTeamOut(**t)
            for t in checkin_service.list_upcoming_checkins(db, limit, reference)
        ],
    )


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    tags=["dashboard"],
    summary="Totals, teams and due check-ins",
)
def dashboard(
    reference_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    reference = normalize_date(reference_date)
    return DashboardResponse(
        today=reference,
        stats=Counts(**team_service.counts(db)),
        teams=[TeamOut(**t) for t in team_service.list_teams(db)],
        due_checkins=[
            ScheduledTeamOut(**t) for t in checkin_service.list_due_checkins(db, reference)
        ],
    )
