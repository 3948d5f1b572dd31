"""
Cadence scheduler: pure calendar arithmetic for team check-ins.

A cadence is an anchor date plus a period length in days. Due dates live on
the grid ``anchor + n * period_days``. Given the most recent check-in date
the scheduler derives the next due date and how many periods were missed.

Nothing here is stored as ground truth: callers recompute on every read.

Rules
-----
  - Dates travel as canonical ``YYYY-MM-DD`` strings; ``date`` objects are
    accepted too and normalized on the way in.
  - No function raises. Malformed input degrades to a documented fallback
    (anchor unchanged, zero days, zero missed).
  - "Today" is an injected ``reference_date``; the system clock is only read
    when the caller leaves it out.

Public API
----------
diff_days(start, end)                               -> int
add_days(value, n)                                  -> str
today()                                             -> str
next_due_date(anchor, period_days, last_activity)   -> str
missed_count(next_due, period_days, reference_date) -> int
resolve_schedule(cadence, last_activity, reference_date) -> ScheduleResult
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

DateLike = Union[str, date]

_CANONICAL_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------------------------------------------------------------------------
# Result types (plain dataclasses, no ORM or Pydantic)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Cadence:
    anchor_date: str
    period_days: int


@dataclass(frozen=True)
class ScheduleResult:
    next_due: str
    missed_count: int


# ---------------------------------------------------------------------------
# Calendar primitives
# ---------------------------------------------------------------------------

def _parse(value: Optional[DateLike]) -> Optional[date]:
    """Canonical string or date → date; anything else → None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _CANONICAL_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _format(value: date) -> str:
    return value.isoformat()


def _valid_period(period_days) -> bool:
    # bool is an int subclass; True is not a cadence length
    return isinstance(period_days, int) and not isinstance(period_days, bool) and period_days > 0


def today() -> str:
    """Local calendar date from the system clock."""
    return _format(date.today())


def normalize_date(value: Optional[DateLike], reference_date: Optional[DateLike] = None) -> str:
    """
    Return ``value`` in canonical form.

    Missing or non-canonical input falls back to ``reference_date`` (itself
    normalized), and finally to today.
    """
    parsed = _parse(value)
    if parsed is not None:
        return _format(parsed)
    fallback = _parse(reference_date)
    return _format(fallback) if fallback is not None else today()


def to_local_date(value: Union[None, str, datetime, date]) -> Optional[str]:
    """
    Truncate a stored activity timestamp to the local calendar date.

    Aware datetimes are converted to local time; naive ones are stored UTC.
    Unparseable input → None (treated as "no activity").
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return _format(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return _format(value.astimezone().date())


def add_days(value: DateLike, n: int) -> str:
    """Shift a calendar date by ``n`` days. Unparseable input comes back unchanged."""
    parsed = _parse(value)
    if parsed is None:
        return value if isinstance(value, str) else str(value)
    try:
        return _format(parsed + timedelta(days=n))
    except OverflowError:
        return _format(parsed)


def days_between(start: Optional[DateLike], end: Optional[DateLike]) -> Optional[int]:
    """Whole days from start to end, or None when either side is unparseable."""
    start_d = _parse(start)
    end_d = _parse(end)
    if start_d is None or end_d is None:
        return None
    return (end_d - start_d).days


def diff_days(start: Optional[DateLike], end: Optional[DateLike]) -> int:
    """
    Whole days from start to end (negative if end precedes start).

    Unparseable input yields 0. Callers must read 0 as "undetermined", not as
    "same day"; use ``days_between`` when the distinction matters.
    """
    days = days_between(start, end)
    return 0 if days is None else days


def is_due(next_due: Optional[DateLike], reference_date: Optional[DateLike] = None) -> bool:
    due = _parse(next_due)
    if due is None:
        return False
    return _format(due) <= normalize_date(reference_date)


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------

def next_due_date(
    anchor: DateLike,
    period_days: int,
    last_activity: Optional[DateLike] = None,
    reference_date: Optional[DateLike] = None,
) -> str:
    """
    Next date on the ``anchor + n * period_days`` grid strictly after
    ``last_activity``.

    Returns the anchor when the cadence is disabled, when there has been no
    activity yet, or when activity predates the anchor.
    """
    start = normalize_date(anchor, reference_date)
    if not _valid_period(period_days):
        return start
    if not last_activity:
        return start

    last = normalize_date(last_activity, reference_date)
    elapsed = diff_days(start, last)
    if elapsed < 0:
        return start
    if elapsed % period_days == 0:
        return add_days(last, period_days)

    intervals = elapsed // period_days + 1
    return add_days(start, intervals * period_days)


def missed_count(
    next_due: Optional[DateLike],
    period_days: int,
    reference_date: Optional[DateLike] = None,
) -> int:
    """
    Whole periods elapsed since ``next_due``.

    Due on the reference date is not missed; one to ``period_days`` days late
    counts as one.
    """
    if not next_due or not _valid_period(period_days):
        return 0
    days_late = diff_days(next_due, normalize_date(reference_date))
    if days_late <= 0:
        return 0
    return (days_late - 1) // period_days + 1


def resolve_schedule(
    cadence: Cadence,
    last_activity: Optional[DateLike] = None,
    reference_date: Optional[DateLike] = None,
) -> ScheduleResult:
    """Derive ``(next_due, missed_count)`` together from one snapshot of inputs."""
    reference = normalize_date(reference_date)
    next_due = next_due_date(
        cadence.anchor_date,
        cadence.period_days,
        last_activity,
        reference_date=reference,
    )
    return ScheduleResult(
        next_due=next_due,
        missed_count=missed_count(next_due, cadence.period_days, reference),
    )
