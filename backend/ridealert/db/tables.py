"""
Single source of truth for database tables that exist after migrations.

alembic/env.py asserts the registered models match this list.
"""
ALL_TABLE_NAMES = (
    "ride_preferences",
    "notified_rides",
    "day_schedules",
    "schedule_archives",
    "push_tokens",
)
