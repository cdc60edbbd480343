"""Cross-habit overview statistics and per-day completion levels."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from habitengine.models import Habit, HabitRecord
from habitengine.store import FileStore
from habitengine.workspace import today_str

RANKING_SIZE = 3


@dataclass
class Overview:
    average_strength: int = 0
    total_habits: int = 0
    active_habits: int = 0
    completion_rate: int = 0  # percent of habits with a positive record on the day
    top_habits: list[str] = field(default_factory=list)
    struggling_habits: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "averageStrength": self.average_strength,
            "totalHabits": self.total_habits,
            "activeHabits": self.active_habits,
            "completionRate": self.completion_rate,
            "topHabits": self.top_habits,
            "strugglingHabits": self.struggling_habits,
        }


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(x + 0.5))


def _positive_on(records: list[HabitRecord], day: str) -> set[str]:
    return {r.habit_id for r in records if r.date == day and r.is_positive}


def compute_overview(habits: list[Habit], records: list[HabitRecord], day: str) -> Overview:
    """Summarize strength and the day's completion across *habits*."""
    summary = Overview()
    if not habits:
        return summary

    summary.total_habits = len(habits)
    summary.active_habits = sum(1 for h in habits if not h.archived)
    summary.average_strength = round_half_up(sum(h.strength_score for h in habits) / len(habits))

    habit_ids = {h.id for h in habits}
    done = _positive_on(records, day) & habit_ids
    summary.completion_rate = round_half_up(len(done) / len(habits) * 100)

    ranked = sorted(habits, key=lambda h: h.strength_score, reverse=True)
    summary.top_habits = [h.id for h in ranked[:RANKING_SIZE]]
    summary.struggling_habits = [h.id for h in sorted(habits, key=lambda h: h.strength_score)[:RANKING_SIZE]]
    return summary


def day_completion(habits: list[Habit], records: list[HabitRecord], day: str) -> float:
    """Fraction of *habits* with a positive record on *day*."""
    if not habits:
        return 0.0
    done = _positive_on(records, day) & {h.id for h in habits}
    return len(done) / len(habits)


def classify_day(rate: float) -> str:
    if rate >= 1:
        return "perfect"
    if rate >= 0.75:
        return "good"
    if rate >= 0.5:
        return "moderate"
    if rate > 0:
        return "low"
    return "none"


def day_level(habits: list[Habit], records: list[HabitRecord], day: str) -> str:
    """Completion level for *day*, or "empty" when there are no habits to complete."""
    if not habits:
        return "empty"
    return classify_day(day_completion(habits, records, day))


def overview(day: str | None = None, root: Path | None = None) -> Overview:
    """Load habits and records from the workspace and compute the overview."""
    if day is None:
        day = today_str(root)
    with FileStore(root).transaction() as db:
        habits = db.list_habits()
        records = db.list_records()
    return compute_overview(habits, records, day)
