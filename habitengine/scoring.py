"""Habit score engine: strength, momentum and consistency.

All three scores are computed from the records created in the trailing
30-day window (by creation time, not by the date a record is for) and
live in [0, 100]. A record is positive when its status is completed or
partial.

- strength: positive records / 30, as a percentage.
- momentum: length of the unbroken run of positive days ending at "now",
  10 points per day.
- consistency: mean over calendar weeks of each week's positive fraction.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Iterable

from habitengine.models import HabitRecord, HabitScore
from habitengine.store import FileStore
from habitengine.workspace import resolve_now

logger = logging.getLogger(__name__)

WINDOW_DAYS = 30
STRENGTH_DENOMINATOR = 30
MOMENTUM_POINTS_PER_DAY = 10
MAX_SCORE = 100.0


@dataclass(frozen=True)
class ScoreSet:
    strength: float = 0.0
    momentum: float = 0.0
    consistency: float = 0.0


def is_positive(record: HabitRecord) -> bool:
    return record.is_positive


def week_key(day: date) -> tuple[int, int]:
    """Return (year, week) where week 1 holds Jan 1 and weeks start on Sunday."""
    jan1 = date(day.year, 1, 1)
    past_days = (day - jan1).days
    jan1_dow = (jan1.weekday() + 1) % 7  # Sunday = 0
    return day.year, math.ceil((past_days + jan1_dow + 1) / 7)


def strength_score(records: Iterable[HabitRecord]) -> float:
    positive = sum(1 for r in records if is_positive(r))
    return min(MAX_SCORE, (positive / STRENGTH_DENOMINATOR) * 100)


def momentum_score(records: Iterable[HabitRecord], now: datetime) -> float:
    """Score the unbroken run of positive days walking back from *now*.

    Each step accepts a record only if it is positive and its date starts no
    more than one whole day before the previously accepted point. The first
    negative record or gap ends the run.
    """
    ordered = sorted(
        ((date.fromisoformat(r.date), r) for r in records),
        key=lambda x: x[0],
        reverse=True,
    )
    if not ordered:
        return 0.0

    streak = 0
    cursor = now
    for day, record in ordered:
        day_start = datetime.combine(day, time.min, tzinfo=now.tzinfo)
        gap_days = (cursor - day_start).days  # floors, also for negative gaps
        if gap_days > 1 or not is_positive(record):
            break
        streak += 1
        cursor = day_start

    return min(MAX_SCORE, float(streak * MOMENTUM_POINTS_PER_DAY))


def consistency_score(records: Iterable[HabitRecord]) -> float:
    weeks: dict[tuple[int, int], list[int]] = defaultdict(list)
    for r in records:
        weeks[week_key(date.fromisoformat(r.date))].append(1 if is_positive(r) else 0)
    if not weeks:
        return 0.0

    fractions = [sum(marks) / len(marks) for marks in weeks.values()]
    average = sum(fractions) / len(fractions)
    return min(MAX_SCORE, average * 100)


def compute_scores(records: list[HabitRecord], now: datetime) -> ScoreSet:
    return ScoreSet(
        strength=strength_score(records),
        momentum=momentum_score(records, now),
        consistency=consistency_score(records),
    )


def window_start(now: datetime) -> datetime:
    return now - timedelta(days=WINDOW_DAYS)


def recompute_scores(
    habit_id: str,
    now: datetime | None = None,
    root: Path | None = None,
) -> HabitScore:
    """Recompute a habit's scores and persist them.

    Appends a HabitScore snapshot dated today and sets the habit's current
    strength, both in one transaction: if anything fails, neither is written.
    """
    now = resolve_now(now, root)
    store = FileStore(root)

    with store.transaction() as db:
        db.require_habit(habit_id)
        window = db.list_records_created_since(habit_id, window_start(now))
        scores = compute_scores(window, now)
        snapshot = db.append_score_snapshot(
            habit_id,
            now.date().isoformat(),
            scores.strength,
            scores.momentum,
            scores.consistency,
            now,
        )
        db.update_habit_strength(habit_id, scores.strength)

    logger.debug(
        "Scores for %s over %d records: strength=%.1f momentum=%.1f consistency=%.1f",
        habit_id, len(window), scores.strength, scores.momentum, scores.consistency,
    )
    return snapshot
