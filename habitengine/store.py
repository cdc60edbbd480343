"""File-backed storage for habits, records and score snapshots.

The whole workspace database lives in one JSON document
(data/habits.json). Every read or write happens inside
FileStore.transaction(), which holds an exclusive flock on data/.lock,
loads the document, and writes it back atomically only if the block
finishes without raising. Two check-ins on the same key therefore never
interleave, and a failed block leaves the file exactly as it was.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import ExitStack, contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from habitengine.errors import DuplicateRecord, HabitNotFound, StorageError
from habitengine.fileio import exclusive_lock, read_json, write_json_atomic
from habitengine.models import Habit, HabitRecord, HabitScore, HabitsFile
from habitengine.workspace import database_path, lock_path, workspace_root

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def _stamp(now: datetime) -> str:
    return now.isoformat(timespec="seconds")


def _parse_stamp(value: str, tz) -> datetime:
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=tz)
    return ts


class Database:
    """An open transaction over the workspace document."""

    def __init__(self, document: HabitsFile):
        self.document = document
        self.dirty = False

    # ── Habits ────────────────────────────────────────────────

    def get_habit(self, habit_id: str) -> Habit | None:
        for h in self.document.habits:
            if h.id == habit_id:
                return h
        return None

    def require_habit(self, habit_id: str) -> Habit:
        habit = self.get_habit(habit_id)
        if habit is None:
            raise HabitNotFound(habit_id)
        return habit

    def list_habits(self) -> list[Habit]:
        return list(self.document.habits)

    def add_habit(self, habit: Habit) -> Habit:
        if self.get_habit(habit.id) is not None:
            raise StorageError(f"Habit ID already exists: {habit.id}")
        self.document.habits.append(habit)
        self.dirty = True
        return habit

    def replace_habit(self, habit: Habit) -> Habit:
        for i, h in enumerate(self.document.habits):
            if h.id == habit.id:
                self.document.habits[i] = habit
                self.dirty = True
                return habit
        raise HabitNotFound(habit.id)

    def remove_habit(self, habit_id: str) -> bool:
        """Delete a habit together with its records and score history."""
        doc = self.document
        before = len(doc.habits)
        doc.habits = [h for h in doc.habits if h.id != habit_id]
        if len(doc.habits) == before:
            return False
        doc.records = [r for r in doc.records if r.habit_id != habit_id]
        doc.scores = [s for s in doc.scores if s.habit_id != habit_id]
        self.dirty = True
        return True

    def update_habit_strength(self, habit_id: str, strength_score: float) -> None:
        habit = self.require_habit(habit_id)
        habit.strength_score = strength_score
        self.dirty = True

    # ── Records ───────────────────────────────────────────────

    def find_record(self, habit_id: str, day: str) -> HabitRecord | None:
        for r in self.document.records:
            if r.habit_id == habit_id and r.date == day:
                return r
        return None

    def list_records(self, habit_id: str | None = None) -> list[HabitRecord]:
        if habit_id is None:
            return list(self.document.records)
        return [r for r in self.document.records if r.habit_id == habit_id]

    def create_record(
        self,
        habit_id: str,
        day: str,
        status: str,
        value: float | None,
        note: str | None,
        completion_rate: float,
        now: datetime,
    ) -> HabitRecord:
        self.require_habit(habit_id)
        if self.find_record(habit_id, day) is not None:
            raise DuplicateRecord(habit_id, day)
        record = HabitRecord(
            id=new_id(),
            habit_id=habit_id,
            date=day,
            status=status,
            value=value,
            completion_rate=completion_rate,
            note=note,
            created_at=_stamp(now),
            updated_at=_stamp(now),
        )
        self.document.records.append(record)
        self.dirty = True
        return record

    def update_record(
        self,
        record_id: str,
        status: str,
        value: float | None,
        note: str | None,
        completion_rate: float,
        now: datetime,
    ) -> HabitRecord:
        for r in self.document.records:
            if r.id == record_id:
                r.status = status
                r.completion_rate = completion_rate
                r.value = value
                r.note = note
                r.updated_at = _stamp(now)
                self.dirty = True
                return r
        raise StorageError(f"Record not found: {record_id}")

    def list_records_created_since(self, habit_id: str, since: datetime) -> list[HabitRecord]:
        """Records of *habit_id* whose creation time is at or after *since*.

        Records with a missing or unparsable createdAt are skipped.
        """
        result = []
        for r in self.list_records(habit_id):
            try:
                created = _parse_stamp(r.created_at, since.tzinfo)
            except (TypeError, ValueError):
                logger.warning("Skipping record %s with invalid createdAt %r", r.id, r.created_at)
                continue
            if created >= since:
                result.append(r)
        return result

    # ── Scores ────────────────────────────────────────────────

    def append_score_snapshot(
        self,
        habit_id: str,
        day: str,
        strength: float,
        momentum: float,
        consistency: float,
        now: datetime,
    ) -> HabitScore:
        self.require_habit(habit_id)
        score = HabitScore(
            id=new_id(),
            habit_id=habit_id,
            date=day,
            strength_score=strength,
            momentum_score=momentum,
            consistency_score=consistency,
            created_at=_stamp(now),
        )
        self.document.scores.append(score)
        self.dirty = True
        return score

    def list_scores(self, habit_id: str) -> list[HabitScore]:
        return [s for s in self.document.scores if s.habit_id == habit_id]


class FileStore:
    """Storage handle for one workspace root."""

    def __init__(self, root: Path | None = None):
        if root is None:
            root = workspace_root()
        self.root = root
        self.path = database_path(root)
        self.lock_file = lock_path(root)

    def _load(self) -> Database:
        try:
            return Database(HabitsFile.from_dict(read_json(self.path)))
        except (OSError, ValueError, TypeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

    def _save(self, db: Database) -> None:
        try:
            write_json_atomic(self.path, db.document.to_dict())
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        """Yield a Database; persist it on clean exit, discard it on error."""
        with ExitStack() as stack:
            try:
                stack.enter_context(exclusive_lock(self.lock_file))
            except OSError as e:
                raise StorageError(f"Failed to lock {self.lock_file}: {e}") from e
            db = self._load()
            yield db
            if db.dirty:
                self._save(db)
                logger.debug("Committed %s", self.path)
