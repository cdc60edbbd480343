"""Workspace root, settings, timezone and path helpers."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from habitengine.fileio import read_yaml

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def workspace_root() -> Path:
    """Get the workspace root directory (contains settings.yaml and data/)."""
    return Path(
        os.environ.get("HABITS_ROOT", str(Path.home() / "habits"))
    ).expanduser().resolve()


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: dict) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            log_level=str(d.get("log_level", "INFO")).upper(),
        )


def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults when missing."""
    return Settings.from_dict(read_yaml(settings_path(root)))


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get the configured timezone, defaulting to UTC on a bad or missing value."""
    try:
        return ZoneInfo(load_settings(root).timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in the workspace timezone."""
    return now_local(root).date().isoformat()


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in the workspace timezone."""
    return datetime.now(get_user_timezone(root))


def resolve_now(now: datetime | None = None, root: Path | None = None) -> datetime:
    """Return *now* as an aware datetime; naive values get the workspace timezone."""
    if now is None:
        return now_local(root)
    if now.tzinfo is None:
        return now.replace(tzinfo=get_user_timezone(root))
    return now


def setup_logging(root: Path | None = None) -> logging.Logger:
    """Configure root logging from settings.yaml. Call once from an entry point."""
    level = getattr(logging, load_settings(root).log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    return logging.getLogger("habitengine")


# ── Path helpers ──────────────────────────────────────────────

def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def data_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data"


def database_path(root: Path | None = None) -> Path:
    return data_dir(root) / "habits.json"


def lock_path(root: Path | None = None) -> Path:
    return data_dir(root) / ".lock"
