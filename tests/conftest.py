"""Shared test fixtures for habitengine tests."""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=ZoneInfo("UTC"))


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with settings and two seeded habits."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    settings = {"timezone": "UTC", "log_level": "DEBUG"}
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    db = {
        "habits": [
            {
                "id": "read",
                "name": "Read 10 min",
                "trackingType": "binary",
                "frequencyType": "daily",
                "archived": False,
                "strengthScore": 0,
                "createdAt": "2024-01-01T08:00:00+00:00",
                "updatedAt": "2024-01-01T08:00:00+00:00",
            },
            {
                "id": "water",
                "name": "Water 2L",
                "trackingType": "count",
                "targetValue": 8,
                "targetUnit": "glasses",
                "frequencyType": "daily",
                "archived": False,
                "strengthScore": 40,
                "createdAt": "2024-01-02T08:00:00+00:00",
                "updatedAt": "2024-01-02T08:00:00+00:00",
            },
        ],
        "records": [],
        "scores": [],
    }
    (root / "data" / "habits.json").write_text(json.dumps(db, indent=2), encoding="utf-8")

    os.environ["HABITS_ROOT"] = str(root)
    yield root
    if "HABITS_ROOT" in os.environ:
        del os.environ["HABITS_ROOT"]


@pytest.fixture
def make_record():
    """Factory for in-memory HabitRecords used by scoring tests."""
    from habitengine.models import HabitRecord

    def _make(day: str, status: str = "completed", habit_id: str = "read") -> HabitRecord:
        return HabitRecord(
            id=f"{habit_id}-{day}",
            habit_id=habit_id,
            date=day,
            status=status,
            completion_rate=1.0 if status == "completed" else 0.0,
            created_at=f"{day}T20:00:00+00:00",
        )

    return _make
