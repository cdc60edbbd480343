"""Habitengine: habit check-ins and rolling habit scores.

Public API re-exports for convenient imports:
    from habitengine import checkin, recompute_scores, create_habit, ...
"""

# Workspace & settings
from habitengine.workspace import (
    workspace_root,
    Settings,
    load_settings,
    get_user_timezone,
    today_str,
    now_local,
    resolve_now,
    setup_logging,
    settings_path,
    database_path,
)

# Errors
from habitengine.errors import (
    HabitError,
    HabitNotFound,
    StorageError,
    DuplicateRecord,
    InvalidCheckin,
)

# Models
from habitengine.models import (
    COMPLETED,
    PARTIAL,
    MISSED,
    SKIPPED,
    RECORD_STATUSES,
    POSITIVE_STATUSES,
    Habit,
    HabitRecord,
    HabitScore,
    HabitsFile,
)

# Storage
from habitengine.store import FileStore, Database

# Scoring
from habitengine.scoring import (
    ScoreSet,
    week_key,
    strength_score,
    momentum_score,
    consistency_score,
    compute_scores,
    recompute_scores,
)

# Check-ins
from habitengine.checkin import (
    RecomputeOutcome,
    checkin,
    toggled_status,
    attempt_recompute,
)

# Habits
from habitengine.habits import (
    validate_habit,
    create_habit,
    get_habit,
    update_habit,
    archive_habit,
    delete_habit,
    list_active_habits,
    get_records,
    get_score_history,
)

# Overview
from habitengine.analytics import (
    Overview,
    compute_overview,
    day_completion,
    classify_day,
    day_level,
    overview,
)
