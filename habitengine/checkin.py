"""Daily check-ins: create-or-toggle a habit's record for one date.

A check-in is two steps run in sequence:

1. Write the record for (habit_id, date). The first check-in on a date
   creates the record with the requested status. Every later check-in on
   the same date toggles it: completed becomes missed, anything else
   becomes completed. The requested status is ignored on a toggle, so a
   partial or skipped record can only come from the first check-in.
2. Recompute the habit's scores. This runs after step 1 has committed and
   its failure is logged and returned as a RecomputeOutcome, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from habitengine.errors import InvalidCheckin
from habitengine.models import COMPLETED, MISSED, RECORD_STATUSES, HabitRecord, HabitScore
from habitengine.scoring import recompute_scores
from habitengine.store import FileStore
from habitengine.workspace import resolve_now

logger = logging.getLogger(__name__)


@dataclass
class RecomputeOutcome:
    habit_id: str
    snapshot: HabitScore | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def completion_rate_for(status: str) -> float:
    return 1.0 if status == COMPLETED else 0.0


def toggled_status(status: str) -> tuple[str, float]:
    """Status and completion rate that a repeat check-in flips *status* to."""
    new_status = MISSED if status == COMPLETED else COMPLETED
    return new_status, completion_rate_for(new_status)


def normalize_day(day: Any) -> str:
    """Return *day* as YYYY-MM-DD, raising InvalidCheckin if it is not a date."""
    if isinstance(day, datetime):
        return day.date().isoformat()
    if isinstance(day, date):
        return day.isoformat()
    if not day or not isinstance(day, str):
        raise InvalidCheckin("Missing required field: date")
    try:
        return date.fromisoformat(day.strip()[:10]).isoformat()
    except ValueError as e:
        raise InvalidCheckin(f"Invalid date: {day!r}") from e


def validate_checkin(
    habit_id: Any, day: Any, status: Any, value: Any = None, note: Any = None,
) -> str:
    """Validate a check-in request and return its normalized date."""
    if not habit_id or not isinstance(habit_id, str):
        raise InvalidCheckin("Missing required field: habitId")
    if status not in RECORD_STATUSES:
        raise InvalidCheckin(f"Invalid status: {status}")
    if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
        raise InvalidCheckin(f"value must be numeric: {value!r}")
    if note is not None and not isinstance(note, str):
        raise InvalidCheckin(f"note must be a string: {note!r}")
    return normalize_day(day)


def attempt_recompute(
    habit_id: str,
    now: datetime | None = None,
    root: Path | None = None,
) -> RecomputeOutcome:
    """Run recompute_scores, capturing any failure instead of raising it."""
    try:
        snapshot = recompute_scores(habit_id, now=now, root=root)
    except Exception as e:
        logger.exception("Score recompute failed for habit %s", habit_id)
        return RecomputeOutcome(habit_id, error=e)
    return RecomputeOutcome(habit_id, snapshot=snapshot)


def write_checkin(
    habit_id: str,
    day: str,
    status: str,
    value: float | None,
    note: str | None,
    now: datetime,
    root: Path | None = None,
) -> tuple[HabitRecord, bool]:
    """Create or toggle the record for (habit_id, day) in one transaction."""
    store = FileStore(root)
    with store.transaction() as db:
        existing = db.find_record(habit_id, day)
        if existing is None:
            record = db.create_record(
                habit_id, day, status, value, note, completion_rate_for(status), now,
            )
            return record, True

        new_status, rate = toggled_status(existing.status)
        record = db.update_record(existing.id, new_status, value, note, rate, now)
        return record, False


def checkin(
    habit_id: str,
    day: str | date,
    status: str = COMPLETED,
    value: float | None = None,
    note: str | None = None,
    *,
    now: datetime | None = None,
    root: Path | None = None,
) -> tuple[HabitRecord, bool]:
    """Record or toggle a habit's completion for *day*.

    Returns (record, created). Raises InvalidCheckin for malformed input,
    HabitNotFound for an unknown habit, and StorageError if the write fails.
    A failed score recompute does not fail the check-in.
    """
    day = validate_checkin(habit_id, day, status, value, note)
    now = resolve_now(now, root)

    record, created = write_checkin(habit_id, day, status, value, note, now, root)
    logger.info(
        "%s record for %s on %s: %s",
        "Created" if created else "Toggled", habit_id, day, record.status,
    )

    attempt_recompute(habit_id, now=now, root=root)
    return record, created
