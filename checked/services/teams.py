"""
Team and people service: CRUD over teams, people, goals and projects.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from checked.core.errors import TeamNotFoundError, PersonNotFoundError
from checked.models.team import Team
from checked.models.person import Person
from checked.models.goal import Goal
from checked.models.project import Project
from checked.models.checkin import Checkin

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

def list_teams(db: Session) -> list[dict]:
    """All teams ordered by name, each with its head count."""
    rows = (
        db.query(Team, func.count(Person.id).label("people_count"))
        .outerjoin(Person, Person.team_id == Team.id)
        .group_by(Team.id)
        .order_by(Team.name)
        .all()
    )
    return [_team_dict(team, people_count=count) for team, count in rows]


def create_team(db: Session, name: str) -> Team:
    team = Team(name=name)
    db.add(team)
    db.commit()
    db.refresh(team)
    log.info("team created id=%s name=%r", team.id, team.name)
    return team


def get_team(db: Session, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise TeamNotFoundError(team_id=team_id)
    return team


def delete_team(db: Session, team_id: int) -> None:
    """Remove a team; people, schedule and check-ins go with it."""
    team = get_team(db, team_id)
    db.delete(team)
    db.commit()
    log.info("team deleted id=%s", team_id)


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------

def list_people_by_team(db: Session, team_id: int) -> list[dict]:
    goals_count = (
        select(func.count(Goal.id))
        .where(Goal.person_id == Person.id)
        .scalar_subquery()
    )
    projects_count = (
        select(func.count(Project.id))
        .where(Project.person_id == Person.id)
        .scalar_subquery()
    )
    avg_rating = (
        select(func.avg(Checkin.rating))
        .where(Checkin.person_id == Person.id)
        .scalar_subquery()
    )
    rows = (
        db.query(
            Person,
            goals_count.label("goals_count"),
            projects_count.label("projects_count"),
            avg_rating.label("avg_rating"),
        )
        .filter(Person.team_id == team_id)
        .order_by(Person.name)
        .all()
    )
    return [
        {
            **_person_dict(person),
            "goals_count": goals or 0,
            "projects_count": projects or 0,
            "avg_rating": _round_rating(avg),
        }
        for person, goals, projects, avg in rows
    ]


def create_person(db: Session, team_id: int, name: str, title: Optional[str] = None) -> Person:
    get_team(db, team_id)
    person = Person(team_id=team_id, name=name, title=title or None)
    db.add(person)
    db.commit()
    db.refresh(person)
    log.info("person created id=%s team_id=%s", person.id, team_id)
    return person


def get_person(db: Session, person_id: int) -> Person:
    person = db.get(Person, person_id)
    if person is None:
        raise PersonNotFoundError(person_id=person_id)
    return person


def get_person_detail(db: Session, person_id: int) -> dict:
    person = get_person(db, person_id)
    return {**_person_dict(person), "team_name": person.team.name}


# ---------------------------------------------------------------------------
# Goals / projects
# ---------------------------------------------------------------------------

def list_goals(db: Session, person_id: int) -> list[Goal]:
    return (
        db.query(Goal)
        .filter(Goal.person_id == person_id)
        .order_by(Goal.created_at.desc(), Goal.id.desc())
        .all()
    )


def create_goal(db: Session, person_id: int, goal: str, expectation: str) -> Goal:
    get_person(db, person_id)
    row = Goal(person_id=person_id, goal=goal, expectation=expectation)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def list_projects(db: Session, person_id: int) -> list[Project]:
    return (
        db.query(Project)
        .filter(Project.person_id == person_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def create_project(db: Session, person_id: int, project: str, expectation: str) -> Project:
    get_person(db, person_id)
    row = Project(person_id=person_id, project=project, expectation=expectation)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------

def counts(db: Session) -> dict[str, int]:
    return {
        "teams": db.query(func.count(Team.id)).scalar() or 0,
        "people": db.query(func.count(Person.id)).scalar() or 0,
        "goals": db.query(func.count(Goal.id)).scalar() or 0,
        "projects": db.query(func.count(Project.id)).scalar() or 0,
    }


# --- dict helpers ---

def _round_rating(value) -> Optional[float]:
    return None if value is None else round(float(value), 1)


def _team_dict(t: Team, people_count: int = 0) -> dict:
    return {
        "id": t.id,
        "name": t.name,
        "people_count": people_count or 0,
        "created_at": t.created_at.isoformat() if t.created_at else None,
    }


def _person_dict(p: Person) -> dict:
    return {
        "id": p.id,
        "team_id": p.team_id,
        "name": p.name,
        "title": p.title,
        "created_at": p.created_at.isoformat() if p.created_at else None,
    }
