"""
Check-in service: team schedules, check-ins and the due / upcoming lists.

The stored cadence (start_date + cadence_days) is ground truth. Every read
recomputes next_due and missed_count through the scheduler from the latest
check-in; `checkin_schedules.next_due` is only refreshed as a display cache.

Public API
----------
get_last_team_checkin_date(db, team_id)                   -> str | None
get_schedule(db, team_id, reference_date)                 -> dict | None
upsert_schedule(db, team_id, cadence_days, start_date)    -> dict
create_checkin(db, team_id, person_id, rating, notes)     -> dict
list_checkins(db, person_id, limit)                       -> list[Checkin]
list_team_checkins(db, team_id, limit)                    -> list[dict]
get_team_checkin_stats(db, team_id)                       -> dict
list_due_checkins(db, reference_date)                     -> list[dict]
list_upcoming_checkins(db, limit, reference_date)         -> list[dict]
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from checked.core.config import settings
from checked.core.errors import InvalidCadenceError, PersonNotOnTeamError
from checked.models.team import Team
from checked.models.person import Person
from checked.models.checkin import Checkin
from checked.models.checkin_schedule import CheckinSchedule
from checked.services.scheduler import (
    Cadence,
    is_due,
    next_due_date,
    normalize_date,
    resolve_schedule,
    to_local_date,
)
from checked.services.teams import get_person, get_team

log = logging.getLogger(__name__)

DateInput = Optional[Union[str, date]]


# ---------------------------------------------------------------------------
# Activity signal
# ---------------------------------------------------------------------------

def get_last_team_checkin_date(db: Session, team_id: int) -> Optional[str]:
    """Latest check-in for the team, truncated to a local calendar date."""
    last = (
        db.query(func.max(Checkin.created_at))
        .filter(Checkin.team_id == team_id)
        .scalar()
    )
    return to_local_date(last)


def _anchor_for(schedule: CheckinSchedule, reference: str) -> str:
    # Rows written before start_date existed only carry next_due.
    return schedule.start_date or schedule.next_due or reference


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

def get_schedule(db: Session, team_id: int, reference_date: DateInput = None) -> Optional[dict]:
    schedule = (
        db.query(CheckinSchedule)
        .filter(CheckinSchedule.team_id == team_id)
        .first()
    )
    if schedule is None:
        return None

    reference = normalize_date(reference_date)
    anchor = _anchor_for(schedule, reference)
    result = resolve_schedule(
        Cadence(anchor_date=anchor, period_days=schedule.cadence_days),
        last_activity=get_last_team_checkin_date(db, team_id),
        reference_date=reference,
    )
    return {
        "id": schedule.id,
        "team_id": schedule.team_id,
        "cadence_days": schedule.cadence_days,
        "start_date": normalize_date(anchor, reference),
        "next_due": result.next_due,
        "missed_count": result.missed_count,
        "due": is_due(result.next_due, reference),
        "created_at": schedule.created_at.isoformat() if schedule.created_at else None,
    }


def upsert_schedule(
    db: Session,
    team_id: int,
    cadence_days: int,
    start_date: DateInput = None,
    reference_date: DateInput = None,
) -> dict:
    """
    Create or update a team's cadence.

    A missing or malformed start date anchors the cadence on the reference
    date (today by default).
    """
    get_team(db, team_id)
    if isinstance(cadence_days, bool) or not isinstance(cadence_days, int) or cadence_days <= 0:
        raise InvalidCadenceError(cadence_days=cadence_days)

    reference = normalize_date(reference_date)
    anchor = normalize_date(start_date, reference)
    next_due = next_due_date(
        anchor,
        cadence_days,
        get_last_team_checkin_date(db, team_id),
        reference_date=reference,
    )

    schedule = (
        db.query(CheckinSchedule)
        .filter(CheckinSchedule.team_id == team_id)
        .first()
    )
    if schedule is not None:
        schedule.cadence_days = cadence_days
        schedule.start_date = anchor
        schedule.next_due = next_due
    else:
        db.add(CheckinSchedule(
            team_id=team_id,
            cadence_days=cadence_days,
            start_date=anchor,
            next_due=next_due,
        ))
    db.commit()
    log.info(
        "schedule saved team_id=%s cadence_days=%s start_date=%s next_due=%s",
        team_id, cadence_days, anchor, next_due,
    )
    return get_schedule(db, team_id, reference)


# ---------------------------------------------------------------------------
# Check-ins
# ---------------------------------------------------------------------------

def create_checkin(
    db: Session,
    team_id: int,
    person_id: int,
    rating: int,
    notes: Optional[str] = None,
) -> dict:
    """
    Record a check-in and roll the team's cached next_due forward from it.

    Returns the stored check-in plus the refreshed next_due (None when the
    team has no schedule).
    """
    get_team(db, team_id)
    person = get_person(db, person_id)
    if person.team_id != team_id:
        raise PersonNotOnTeamError(person_id=person_id, team_id=team_id)

    checkin = Checkin(team_id=team_id, person_id=person_id, rating=rating, notes=notes or None)
    db.add(checkin)
    db.flush()

    next_due: Optional[str] = None
    schedule = (
        db.query(CheckinSchedule)
        .filter(CheckinSchedule.team_id == team_id)
        .first()
    )
    if schedule is not None:
        activity = to_local_date(checkin.created_at)
        anchor = _anchor_for(schedule, normalize_date(activity))
        next_due = next_due_date(anchor, schedule.cadence_days, activity)
        schedule.next_due = next_due

    db.commit()
    db.refresh(checkin)
    log.info(
        "checkin recorded id=%s team_id=%s person_id=%s rating=%s next_due=%s",
        checkin.id, team_id, person_id, rating, next_due,
    )
    return {**_checkin_dict(checkin), "next_due": next_due}


def list_checkins(db: Session, person_id: int, limit: Optional[int] = None) -> list[Checkin]:
    """Most recent check-ins for one person, newest first."""
    return (
        db.query(Checkin)
        .filter(Checkin.person_id == person_id)
        .order_by(Checkin.created_at.desc(), Checkin.id.desc())
        .limit(limit or settings.PERSON_CHECKINS_LIMIT)
        .all()
    )


def list_team_checkins(db: Session, team_id: int, limit: Optional[int] = None) -> list[dict]:
    rows = (
        db.query(Checkin, Person.name)
        .join(Person, Person.id == Checkin.person_id)
        .filter(Checkin.team_id == team_id)
        .order_by(Checkin.created_at.desc(), Checkin.id.desc())
        .limit(limit or settings.TEAM_CHECKINS_LIMIT)
        .all()
    )
    return [{**_checkin_dict(c), "person_name": name} for c, name in rows]


def get_team_checkin_stats(db: Session, team_id: int) -> dict:
    total, average = (
        db.query(func.count(Checkin.id), func.avg(Checkin.rating))
        .filter(Checkin.team_id == team_id)
        .one()
    )
    return {
        "total_checkins": int(total or 0),
        "average_rating": None if average is None else float(average),
    }


# ---------------------------------------------------------------------------
# Due / upcoming listings
# ---------------------------------------------------------------------------

def _scheduled_teams(db: Session, reference: str) -> list[dict]:
    """Every scheduled team with its schedule recomputed against `reference`."""
    people_count = (
        select(func.count(Person.id))
        .where(Person.team_id == Team.id)
        .scalar_subquery()
    )
    last_checkin_at = (
        select(func.max(Checkin.created_at))
        .where(Checkin.team_id == Team.id)
        .scalar_subquery()
    )
    rows = (
        db.query(
            Team.id,
            Team.name,
            CheckinSchedule,
            people_count.label("people_count"),
            last_checkin_at.label("last_checkin_at"),
        )
        .join(CheckinSchedule, CheckinSchedule.team_id == Team.id)
        .order_by(Team.name)
        .all()
    )

    teams = []
    for team_id, team_name, schedule, people, last_at in rows:
        anchor = _anchor_for(schedule, reference)
        result = resolve_schedule(
            Cadence(anchor_date=anchor, period_days=schedule.cadence_days),
            last_activity=to_local_date(last_at),
            reference_date=reference,
        )
        teams.append({
            "team_id": team_id,
            "team_name": team_name,
            "start_date": normalize_date(anchor, reference),
            "cadence_days": schedule.cadence_days,
            "people_count": people or 0,
            "last_checkin_at": _isoformat(last_at),
            "next_due": result.next_due,
            "missed_count": result.missed_count,
        })
    return teams


def list_due_checkins(db: Session, reference_date: DateInput = None) -> list[dict]:
    """Teams whose next_due is on or before the reference date, oldest first."""
    reference = normalize_date(reference_date)
    due = [t for t in _scheduled_teams(db, reference) if t["next_due"] <= reference]
    return sorted(due, key=lambda t: t["next_due"])


def list_upcoming_checkins(
    db: Session,
    limit: Optional[int] = None,
    reference_date: DateInput = None,
) -> list[dict]:
    """Teams whose next_due is after the reference date, soonest first."""
    reference = normalize_date(reference_date)
    upcoming = [t for t in _scheduled_teams(db, reference) if t["next_due"] > reference]
    upcoming.sort(key=lambda t: t["next_due"])
    return upcoming[: limit if limit is not None else settings.UPCOMING_LIMIT]


# --- dict helpers ---

def _isoformat(value) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _checkin_dict(c: Checkin) -> dict:
    return {
        "id": c.id,
        "team_id": c.team_id,
        "person_id": c.person_id,
        "rating": c.rating,
        "notes": c.notes,
        "created_at": _isoformat(c.created_at),
    }
