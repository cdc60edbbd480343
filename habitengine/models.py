"""Typed dataclasses for the habit data model.

All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# ── Record status ─────────────────────────────────────────────

COMPLETED = "completed"
PARTIAL = "partial"
MISSED = "missed"
SKIPPED = "skipped"

# "pending" is the absence of a record and is never stored.
RECORD_STATUSES = {COMPLETED, PARTIAL, MISSED, SKIPPED}
POSITIVE_STATUSES = {COMPLETED, PARTIAL}


def _optional_float(v: Any) -> float | None:
    return None if v is None else float(v)


# ── Habit ─────────────────────────────────────────────────────


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    description: str = ""
    tracking_type: str = "binary"  # binary, count, duration
    target_value: float | None = None
    target_unit: str | None = None
    frequency_type: str = "daily"  # daily, weekly, custom
    frequency_days: list[str] = field(default_factory=list)  # mon, tue, ...
    color: str | None = None
    icon: str | None = None
    reminder_time: str | None = None  # HH:MM
    archived: bool = False
    strength_score: float = 0.0
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Habit:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            description=str(d.get("description") or ""),
            tracking_type=str(d.get("trackingType") or "binary"),
            target_value=_optional_float(d.get("targetValue")),
            target_unit=d.get("targetUnit"),
            frequency_type=str(d.get("frequencyType") or "daily"),
            frequency_days=[str(x).lower() for x in (d.get("frequencyDays") or [])],
            color=d.get("color"),
            icon=d.get("icon"),
            reminder_time=d.get("reminderTime"),
            archived=bool(d.get("archived", False)),
            strength_score=float(d.get("strengthScore", 0.0) or 0.0),
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "trackingType": self.tracking_type,
            "frequencyType": self.frequency_type,
            "archived": self.archived,
            "strengthScore": self.strength_score,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.target_value is not None:
            d["targetValue"] = self.target_value
        if self.target_unit:
            d["targetUnit"] = self.target_unit
        if self.frequency_days:
            d["frequencyDays"] = self.frequency_days
        if self.color:
            d["color"] = self.color
        if self.icon:
            d["icon"] = self.icon
        if self.reminder_time:
            d["reminderTime"] = self.reminder_time
        return d


# ── Records ───────────────────────────────────────────────────


@dataclass
class HabitRecord:
    """One day's completion state for one habit."""

    id: str = ""
    habit_id: str = ""
    date: str = ""  # YYYY-MM-DD
    status: str = COMPLETED
    value: float | None = None
    completion_rate: float = 0.0
    note: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_positive(self) -> bool:
        return self.status in POSITIVE_STATUSES

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitRecord:
        return cls(
            id=str(d.get("id", "")),
            habit_id=str(d.get("habitId", "")),
            date=str(d.get("date", "")),
            status=str(d.get("status", COMPLETED)),
            value=_optional_float(d.get("value")),
            completion_rate=float(d.get("completionRate", 0.0) or 0.0),
            note=d.get("note"),
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "habitId": self.habit_id,
            "date": self.date,
            "status": self.status,
            "value": self.value,
            "completionRate": self.completion_rate,
            "note": self.note,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# ── Scores ────────────────────────────────────────────────────


@dataclass(frozen=True)
class HabitScore:
    """Immutable analytics snapshot taken at one recompute."""

    id: str = ""
    habit_id: str = ""
    date: str = ""  # day of computation, not of a record
    strength_score: float = 0.0
    momentum_score: float = 0.0
    consistency_score: float = 0.0
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitScore:
        return cls(
            id=str(d.get("id", "")),
            habit_id=str(d.get("habitId", "")),
            date=str(d.get("date", "")),
            strength_score=float(d.get("strengthScore", 0.0)),
            momentum_score=float(d.get("momentumScore", 0.0)),
            consistency_score=float(d.get("consistencyScore", 0.0)),
            created_at=str(d.get("createdAt", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "habitId": self.habit_id,
            "date": self.date,
            "strengthScore": self.strength_score,
            "momentumScore": self.momentum_score,
            "consistencyScore": self.consistency_score,
            "createdAt": self.created_at,
        }


# ── Database document ─────────────────────────────────────────


@dataclass
class HabitsFile:
    habits: list[Habit] = field(default_factory=list)
    records: list[HabitRecord] = field(default_factory=list)
    scores: list[HabitScore] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HabitsFile:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            habits=[Habit.from_dict(h) for h in (d.get("habits") or [])],
            records=[HabitRecord.from_dict(r) for r in (d.get("records") or [])],
            scores=[HabitScore.from_dict(s) for s in (d.get("scores") or [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "habits": [h.to_dict() for h in self.habits],
            "records": [r.to_dict() for r in self.records],
            "scores": [s.to_dict() for s in self.scores],
        }
