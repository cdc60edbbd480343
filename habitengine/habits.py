"""Habit CRUD, validation, and the active-habit listing."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from habitengine.models import Habit, HabitRecord, HabitScore
from habitengine.store import FileStore, new_id
from habitengine.workspace import resolve_now, today_str

logger = logging.getLogger(__name__)


# ── Validation ────────────────────────────────────────────────


VALID_TRACKING_TYPES = {"binary", "count", "duration"}
VALID_FREQUENCY_TYPES = {"daily", "weekly", "custom"}
VALID_DAYS = {"mon", "tue", "wed", "thu", "fri", "sat", "sun"}

# Managed by the engine, never taken from user input.
READ_ONLY_FIELDS = {"id", "strengthScore", "createdAt", "updatedAt"}

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_habit(habit: dict[str, Any]) -> list[str]:
    """Validate habit fields and return list of errors (empty if valid)."""
    errors = []
    if not str(habit.get("name") or "").strip():
        errors.append("Missing required field: name")

    tracking = habit.get("trackingType")
    if tracking is not None and tracking not in VALID_TRACKING_TYPES:
        errors.append(f"Invalid tracking type: {tracking}")

    frequency = habit.get("frequencyType")
    if frequency is not None and frequency not in VALID_FREQUENCY_TYPES:
        errors.append(f"Invalid frequency type: {frequency}")

    days = habit.get("frequencyDays")
    if days is not None:
        if not isinstance(days, list):
            errors.append("frequencyDays must be a list")
        else:
            bad = [d for d in days if str(d).lower() not in VALID_DAYS]
            if bad:
                errors.append(f"Invalid frequency days: {', '.join(map(str, bad))}")

    target = habit.get("targetValue")
    if target is not None and (isinstance(target, bool) or not isinstance(target, (int, float))):
        errors.append("targetValue must be numeric")

    reminder = habit.get("reminderTime")
    if reminder is not None and not _TIME_RE.match(str(reminder)):
        errors.append(f"Invalid reminder time: {reminder}")

    if "archived" in habit and not isinstance(habit["archived"], bool):
        errors.append("archived must be a boolean")

    return errors


# ── CRUD ──────────────────────────────────────────────────────


def create_habit(
    habit_data: dict[str, Any],
    now: datetime | None = None,
    root: Path | None = None,
) -> tuple[Habit, list[str]]:
    """Create and store a new habit. Returns (habit, errors)."""
    errors = validate_habit(habit_data)
    if errors:
        return Habit(), errors

    stamp = resolve_now(now, root).isoformat(timespec="seconds")
    data = {k: v for k, v in habit_data.items() if k not in READ_ONLY_FIELDS}
    habit = Habit.from_dict(data)
    habit.id = new_id()
    habit.strength_score = 0.0
    habit.created_at = stamp
    habit.updated_at = stamp

    with FileStore(root).transaction() as db:
        db.add_habit(habit)
    logger.info("Created habit %s (%s)", habit.id, habit.name)
    return habit, []


def get_habit(habit_id: str, root: Path | None = None) -> Habit | None:
    with FileStore(root).transaction() as db:
        return db.get_habit(habit_id)


def update_habit(
    habit_id: str,
    updates: dict[str, Any],
    now: datetime | None = None,
    root: Path | None = None,
) -> tuple[Habit | None, list[str]]:
    """Update a habit by ID. Returns (updated_habit, errors)."""
    with FileStore(root).transaction() as db:
        habit = db.get_habit(habit_id)
        if not habit:
            return None, [f"Habit not found: {habit_id}"]

        habit_dict = habit.to_dict()
        habit_dict.update({k: v for k, v in updates.items() if k not in READ_ONLY_FIELDS})

        errors = validate_habit(habit_dict)
        if errors:
            return None, errors

        updated = Habit.from_dict(habit_dict)
        updated.updated_at = resolve_now(now, root).isoformat(timespec="seconds")
        db.replace_habit(updated)
    return updated, []


def archive_habit(habit_id: str, archived: bool = True, root: Path | None = None) -> Habit | None:
    """Set a habit's archived flag. Returns None if the habit does not exist."""
    habit, _errors = update_habit(habit_id, {"archived": archived}, root=root)
    return habit


def delete_habit(habit_id: str, root: Path | None = None) -> bool:
    """Delete a habit along with its records and score history."""
    with FileStore(root).transaction() as db:
        removed = db.remove_habit(habit_id)
    if removed:
        logger.info("Deleted habit %s", habit_id)
    return removed


# ── Queries ───────────────────────────────────────────────────


def list_active_habits(day: str | None = None, root: Path | None = None) -> list[dict[str, Any]]:
    """Non-archived habits, newest first, each with its record for *day* attached.

    *day* defaults to today in the workspace timezone.
    """
    if day is None:
        day = today_str(root)

    with FileStore(root).transaction() as db:
        habits = [h for h in db.list_habits() if not h.archived]
        result = []
        for habit in habits:
            d = habit.to_dict()
            record = db.find_record(habit.id, day)
            d["records"] = [record.to_dict()] if record else []
            result.append(d)

    result.sort(key=lambda x: x.get("createdAt", ""), reverse=True)
    return result


def get_records(habit_id: str, root: Path | None = None) -> list[HabitRecord]:
    """All records of a habit, oldest date first."""
    with FileStore(root).transaction() as db:
        return sorted(db.list_records(habit_id), key=lambda r: r.date)


def get_score_history(habit_id: str, root: Path | None = None) -> list[HabitScore]:
    """Score snapshots of a habit in the order they were taken."""
    with FileStore(root).transaction() as db:
        return db.list_scores(habit_id)
