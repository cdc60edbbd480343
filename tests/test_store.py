"""Tests for habitengine/store.py: transactions and the record/score contract."""

import logging
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from habitengine.errors import DuplicateRecord, HabitNotFound, StorageError
from habitengine.fileio import read_json
from habitengine.store import FileStore


def test_transaction_commits(workspace, now):
    store = FileStore(workspace)
    with store.transaction() as db:
        db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)

    data = read_json(workspace / "data" / "habits.json")
    assert len(data["records"]) == 1
    assert data["records"][0]["habitId"] == "read"
    assert data["records"][0]["completionRate"] == 1.0


def test_transaction_discards_on_error(workspace, now):
    store = FileStore(workspace)
    with pytest.raises(RuntimeError):
        with store.transaction() as db:
            db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)
            raise RuntimeError("abort")

    with store.transaction() as db:
        assert db.list_records() == []


def test_read_only_transaction_does_not_write(workspace):
    store = FileStore(workspace)
    with patch("habitengine.store.write_json_atomic") as write:
        with store.transaction() as db:
            db.list_habits()
    write.assert_not_called()


def test_missing_database_starts_empty(tmp_path):
    store = FileStore(tmp_path / "fresh")
    with store.transaction() as db:
        assert db.list_habits() == []


def test_corrupt_database_raises_storage_error(workspace):
    (workspace / "data" / "habits.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        with FileStore(workspace).transaction():
            pass


def test_create_record_requires_habit(workspace, now):
    with pytest.raises(HabitNotFound):
        with FileStore(workspace).transaction() as db:
            db.create_record("nope", "2024-01-15", "completed", None, None, 1.0, now)


def test_create_record_unique_per_day(workspace, now):
    with FileStore(workspace).transaction() as db:
        db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)
        with pytest.raises(DuplicateRecord):
            db.create_record("read", "2024-01-15", "missed", None, None, 0.0, now)
        # Same date on another habit is fine
        db.create_record("water", "2024-01-15", "completed", 8, None, 1.0, now)


def test_duplicate_record_is_storage_error():
    assert issubclass(DuplicateRecord, StorageError)


def test_update_record_sets_status_and_rate_together(workspace, now):
    store = FileStore(workspace)
    with store.transaction() as db:
        rec = db.create_record("read", "2024-01-15", "completed", None, "n", 1.0, now)
    with store.transaction() as db:
        db.update_record(rec.id, "missed", 2, None, 0.0, now + timedelta(minutes=5))
    with store.transaction() as db:
        updated = db.find_record("read", "2024-01-15")
    assert (updated.status, updated.completion_rate, updated.value, updated.note) == ("missed", 0.0, 2, None)


def test_update_record_unknown(workspace, now):
    with pytest.raises(StorageError):
        with FileStore(workspace).transaction() as db:
            db.update_record("missing", "missed", None, None, 0.0, now)


def test_list_records_created_since(workspace, now):
    with FileStore(workspace).transaction() as db:
        db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)
        db.create_record("read", "2024-01-01", "completed", None, None, 1.0, now - timedelta(days=31))
        db.create_record("water", "2024-01-15", "completed", None, None, 1.0, now)
        recent = db.list_records_created_since("read", now - timedelta(days=30))
    assert [r.date for r in recent] == ["2024-01-15"]


def test_list_records_created_since_naive_stamp(workspace, now):
    with FileStore(workspace).transaction() as db:
        rec = db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)
        rec.created_at = "2024-01-15T11:00:00"
        assert db.list_records_created_since("read", now - timedelta(days=1)) == [rec]


def test_list_records_created_since_skips_bad_stamps(workspace, now, caplog):
    with FileStore(workspace).transaction() as db:
        good = db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)
        db.create_record("read", "2024-01-14", "completed", None, None, 1.0, now).created_at = "yesterday"
        db.create_record("read", "2024-01-13", "completed", None, None, 1.0, now).created_at = ""
        with caplog.at_level(logging.WARNING, logger="habitengine.store"):
            recent = db.list_records_created_since("read", now - timedelta(days=1))
    assert recent == [good]
    assert "invalid createdAt" in caplog.text


def test_append_score_snapshot_and_strength(workspace, now):
    store = FileStore(workspace)
    with store.transaction() as db:
        db.append_score_snapshot("read", "2024-01-15", 10.0, 30.0, 100.0, now)
        db.update_habit_strength("read", 10.0)
    with store.transaction() as db:
        scores = db.list_scores("read")
        assert db.get_habit("read").strength_score == 10.0
    assert len(scores) == 1
    assert (scores[0].strength_score, scores[0].momentum_score, scores[0].consistency_score) == (10.0, 30.0, 100.0)


def test_remove_habit_cascades(workspace, now):
    store = FileStore(workspace)
    with store.transaction() as db:
        db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)
        db.create_record("water", "2024-01-15", "completed", None, None, 1.0, now)
        db.append_score_snapshot("read", "2024-01-15", 1.0, 1.0, 1.0, now)
    with store.transaction() as db:
        assert db.remove_habit("read") is True
        assert db.remove_habit("read") is False
    with store.transaction() as db:
        assert db.get_habit("read") is None
        assert db.list_records("read") == []
        assert db.list_scores("read") == []
        assert len(db.list_records("water")) == 1


def test_write_failure_raises_storage_error(workspace, now):
    with patch("habitengine.store.write_json_atomic", side_effect=OSError("read-only")):
        with pytest.raises(StorageError, match="read-only"):
            with FileStore(workspace).transaction() as db:
                db.update_habit_strength("read", 5.0)


def test_timestamps_are_iso(workspace):
    now = datetime.fromisoformat("2024-01-15T12:00:00+00:00")
    with FileStore(workspace).transaction() as db:
        rec = db.create_record("read", "2024-01-15", "completed", None, None, 1.0, now)
    assert rec.created_at == "2024-01-15T12:00:00+00:00"


def test_unserializable_document_raises_storage_error(workspace, now):
    with pytest.raises(StorageError):
        with FileStore(workspace).transaction() as db:
            db.create_record("read", "2024-01-15", "completed", None, object(), 1.0, now)
    assert read_json(workspace / "data" / "habits.json")["records"] == []
