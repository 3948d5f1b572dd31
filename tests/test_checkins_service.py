"""
Service-layer tests for schedules, check-ins and the due / upcoming lists
(no HTTP layer).

Check-ins are stamped with the real clock, so expectations are expressed
relative to `today()`.
"""
from __future__ import annotations

import pytest

from checked.core.errors import (
    InvalidCadenceError,
    PersonNotFoundError,
    PersonNotOnTeamError,
    TeamNotFoundError,
)
from checked.models.checkin_schedule import CheckinSchedule
from checked.models.person import Person
from checked.services import checkins as checkin_service
from checked.services import teams as team_service
from checked.services.scheduler import add_days, today


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _team_with_person(db, name: str):
    team = team_service.create_team(db, name)
    person = team_service.create_person(db, team.id, f"{name} member", "Engineer")
    return team, person


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

class TestUpsertSchedule:
    def test_create_without_checkins_anchors_on_start_date(self, db):
        team, _ = _team_with_person(db, "Svc Anchor")
        start = add_days(today(), 3)
        schedule = checkin_service.upsert_schedule(db, team.id, 7, start)
        assert schedule["start_date"] == start
        assert schedule["next_due"] == start
        assert schedule["missed_count"] == 0
        assert schedule["due"] is False

    def test_missing_start_date_defaults_to_reference(self, db):
        team, _ = _team_with_person(db, "Svc Default Start")
        schedule = checkin_service.upsert_schedule(
            db, team.id, 14, None, reference_date="2030-06-01"
        )
        assert schedule["start_date"] == "2030-06-01"

    def test_update_replaces_cadence(self, db):
        team, _ = _team_with_person(db, "Svc Update")
        checkin_service.upsert_schedule(db, team.id, 7, "2024-01-01")
        schedule = checkin_service.upsert_schedule(db, team.id, 14, "2024-02-01")
        assert schedule["cadence_days"] == 14
        assert schedule["start_date"] == "2024-02-01"
        rows = db.query(CheckinSchedule).filter(CheckinSchedule.team_id == team.id).count()
        assert rows == 1

    @pytest.mark.parametrize("cadence", [0, -3])
    def test_non_positive_cadence_rejected(self, db, cadence):
        team, _ = _team_with_person(db, f"Svc Bad Cadence {cadence}")
        with pytest.raises(InvalidCadenceError):
            checkin_service.upsert_schedule(db, team.id, cadence, "2024-01-01")

    def test_unknown_team(self, db):
        with pytest.raises(TeamNotFoundError):
            checkin_service.upsert_schedule(db, 999_999, 7, "2024-01-01")


class TestGetSchedule:
    def test_no_schedule(self, db):
        team, _ = _team_with_person(db, "Svc Unscheduled")
        assert checkin_service.get_schedule(db, team.id) is None

    def test_overdue_without_checkins(self, db):
        team, _ = _team_with_person(db, "Svc Overdue")
        checkin_service.upsert_schedule(db, team.id, 7, "2024-01-15")
        schedule = checkin_service.get_schedule(db, team.id, "2024-01-30")
        assert schedule["next_due"] == "2024-01-15"
        assert schedule["missed_count"] == 3
        assert schedule["due"] is True

    def test_recomputed_from_latest_checkin(self, db):
        team, person = _team_with_person(db, "Svc Recompute")
        start = add_days(today(), -3)
        checkin_service.upsert_schedule(db, team.id, 7, start)
        checkin_service.create_checkin(db, team.id, person.id, 4, "fine")

        schedule = checkin_service.get_schedule(db, team.id)
        assert schedule["next_due"] == add_days(start, 7)
        assert schedule["missed_count"] == 0
        assert schedule["due"] is False

    def test_ignores_stale_cache(self, db):
        team, _ = _team_with_person(db, "Svc Stale Cache")
        checkin_service.upsert_schedule(db, team.id, 7, "2024-01-01")
        row = db.query(CheckinSchedule).filter(CheckinSchedule.team_id == team.id).one()
        row.next_due = "2099-12-31"
        db.commit()

        schedule = checkin_service.get_schedule(db, team.id, "2024-01-01")
        assert schedule["next_due"] == "2024-01-01"

    def test_legacy_row_without_start_date_anchors_on_next_due(self, db):
        team, _ = _team_with_person(db, "Svc Legacy")
        db.add(CheckinSchedule(team_id=team.id, cadence_days=7, start_date=None, next_due="2024-03-04"))
        db.commit()

        schedule = checkin_service.get_schedule(db, team.id, "2024-03-04")
        assert schedule["start_date"] == "2024-03-04"
        assert schedule["next_due"] == "2024-03-04"
        assert schedule["due"] is True


# ---------------------------------------------------------------------------
# Check-ins
# ---------------------------------------------------------------------------

class TestCreateCheckin:
    def test_checkin_on_anchor_day_rolls_one_period(self, db):
        team, person = _team_with_person(db, "Svc Anchor Day")
        checkin_service.upsert_schedule(db, team.id, 7, today())
        created = checkin_service.create_checkin(db, team.id, person.id, 5, "  great week ")

        assert created["next_due"] == add_days(today(), 7)
        assert created["rating"] == 5
        row = db.query(CheckinSchedule).filter(CheckinSchedule.team_id == team.id).one()
        db.refresh(row)
        assert row.next_due == add_days(today(), 7)

    def test_without_schedule_returns_no_next_due(self, db):
        team, person = _team_with_person(db, "Svc No Schedule")
        created = checkin_service.create_checkin(db, team.id, person.id, 3)
        assert created["next_due"] is None
        assert created["notes"] is None

    def test_person_on_another_team(self, db):
        team_a, _ = _team_with_person(db, "Svc Team A")
        _, person_b = _team_with_person(db, "Svc Team B")
        with pytest.raises(PersonNotOnTeamError):
            checkin_service.create_checkin(db, team_a.id, person_b.id, 3)

    def test_unknown_person(self, db):
        team, _ = _team_with_person(db, "Svc Ghost")
        with pytest.raises(PersonNotFoundError):
            checkin_service.create_checkin(db, team.id, 999_999, 3)

    def test_last_checkin_date_is_local_today(self, db):
        team, person = _team_with_person(db, "Svc Last Date")
        assert checkin_service.get_last_team_checkin_date(db, team.id) is None
        checkin_service.create_checkin(db, team.id, person.id, 2)
        assert checkin_service.get_last_team_checkin_date(db, team.id) == today()

    def test_stats_and_listings(self, db):
        team, person = _team_with_person(db, "Svc Stats")
        assert checkin_service.get_team_checkin_stats(db, team.id) == {
            "total_checkins": 0,
            "average_rating": None,
        }
        for rating in (2, 3, 5):
            checkin_service.create_checkin(db, team.id, person.id, rating)

        stats = checkin_service.get_team_checkin_stats(db, team.id)
        assert stats["total_checkins"] == 3
        assert stats["average_rating"] == pytest.approx(10 / 3)

        recent = checkin_service.list_team_checkins(db, team.id)
        assert [c["rating"] for c in recent] == [5, 3, 2]
        assert all(c["person_name"] == person.name for c in recent)

        people = team_service.list_people_by_team(db, team.id)
        assert people[0]["avg_rating"] == 3.3

    def test_person_list_is_capped(self, db):
        team, person = _team_with_person(db, "Svc Capped")
        for _ in range(10):
            checkin_service.create_checkin(db, team.id, person.id, 4)
        assert len(checkin_service.list_checkins(db, person.id)) == 8
        assert len(checkin_service.list_checkins(db, person.id, limit=3)) == 3


# ---------------------------------------------------------------------------
# Due / upcoming
# ---------------------------------------------------------------------------

class TestDueAndUpcoming:
    def test_due_list(self, db):
        team, _ = _team_with_person(db, "Svc Due List")
        checkin_service.upsert_schedule(db, team.id, 7, add_days(today(), -14))

        due = checkin_service.list_due_checkins(db)
        row = next(t for t in due if t["team_id"] == team.id)
        assert row["next_due"] == add_days(today(), -14)
        assert row["missed_count"] == 2
        assert row["people_count"] == 1
        assert [t["next_due"] for t in due] == sorted(t["next_due"] for t in due)

    def test_upcoming_list(self, db):
        team, _ = _team_with_person(db, "Svc Upcoming List")
        checkin_service.upsert_schedule(db, team.id, 7, add_days(today(), 5))

        upcoming = checkin_service.list_upcoming_checkins(db, limit=1000)
        assert any(t["team_id"] == team.id for t in upcoming)
        assert all(t["next_due"] > today() for t in upcoming)
        assert not any(t["team_id"] == team.id for t in checkin_service.list_due_checkins(db))

    def test_upcoming_limit(self, db):
        for i in range(4):
            team, _ = _team_with_person(db, f"Svc Upcoming Limit {i}")
            checkin_service.upsert_schedule(db, team.id, 7, add_days(today(), 20 + i))
        assert len(checkin_service.list_upcoming_checkins(db)) == 3
        assert len(checkin_service.list_upcoming_checkins(db, limit=2)) == 2

    def test_reference_date_injected(self, db):
        team, _ = _team_with_person(db, "Svc Injected")
        checkin_service.upsert_schedule(db, team.id, 7, "2031-01-01")

        before = checkin_service.list_due_checkins(db, "2030-12-31")
        after = checkin_service.list_due_checkins(db, "2031-01-09")
        assert not any(t["team_id"] == team.id for t in before)
        row = next(t for t in after if t["team_id"] == team.id)
        assert row["missed_count"] == 2


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

class TestTeams:
    def test_delete_team_cascades(self, db):
        team, person = _team_with_person(db, "Svc Delete Me")
        checkin_service.upsert_schedule(db, team.id, 7, "2024-01-01")
        checkin_service.create_checkin(db, team.id, person.id, 4)
        team_service.create_goal(db, person.id, "Ship it", "By Friday")

        team_id = team.id
        team_service.delete_team(db, team_id)
        db.expire_all()

        assert db.query(Person).filter(Person.team_id == team_id).count() == 0
        assert checkin_service.get_schedule(db, team_id) is None
        with pytest.raises(TeamNotFoundError):
            team_service.get_team(db, team_id)

    def test_counts_grow(self, db):
        before = team_service.counts(db)
        team, person = _team_with_person(db, "Svc Counts")
        team_service.create_goal(db, person.id, "Goal", "Expectation")
        team_service.create_project(db, person.id, "Project", "Expectation")
        after = team_service.counts(db)
        assert after["teams"] == before["teams"] + 1
        assert after["people"] == before["people"] + 1
        assert after["goals"] == before["goals"] + 1
        assert after["projects"] == before["projects"] + 1
