"""Exception types raised by habitengine."""

from __future__ import annotations


class HabitError(Exception):
    """Base class for all habitengine errors."""


class HabitNotFound(HabitError, LookupError):
    def __init__(self, habit_id: str):
        super().__init__(f"Habit not found: {habit_id}")
        self.habit_id = habit_id


class StorageError(HabitError):
    """A read or write against the workspace database failed."""


class DuplicateRecord(StorageError):
    def __init__(self, habit_id: str, day: str):
        super().__init__(f"Record already exists for {habit_id} on {day}")
        self.habit_id = habit_id
        self.day = day


class InvalidCheckin(HabitError, ValueError):
    """A check-in request was malformed and never reached storage."""
