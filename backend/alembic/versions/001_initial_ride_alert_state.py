"""Ride alert state: preferences, notified rides, day schedules, archives, push tokens."""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_json = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "ride_preferences",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("ride_id", sa.String(64), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("max_wait", sa.Integer(), nullable=False),
        sa.UniqueConstraint("user_id", "ride_id", name="uq_ride_preferences_user_ride"),
    )
    op.create_index("ix_ride_preferences_user_id", "ride_preferences", ["user_id"])

    op.create_table(
        "notified_rides",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("ride_id", sa.String(64), nullable=False),
        sa.UniqueConstraint("user_id", "ride_id", name="uq_notified_rides_user_ride"),
    )
    op.create_index("ix_notified_rides_user_id", "notified_rides", ["user_id"])

    op.create_table(
        "day_schedules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("date_key", sa.String(10), nullable=False),
        sa.Column("payload", _json, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "date_key", name="uq_day_schedules_user_date"),
    )
    op.create_index("ix_day_schedules_user_id", "day_schedules", ["user_id"])

    op.create_table(
        "schedule_archives",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("date_key", sa.String(10), nullable=False),
        sa.Column("payload", _json, nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "date_key", name="uq_schedule_archives_user_date"),
    )
    op.create_index("ix_schedule_archives_user_id", "schedule_archives", ["user_id"])

    op.create_table(
        "push_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("device_token", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_push_tokens_user_id", "push_tokens", ["user_id"], unique=True)
    op.create_index("ix_push_tokens_device_token", "push_tokens", ["device_token"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_push_tokens_device_token", table_name="push_tokens")
    op.drop_index("ix_push_tokens_user_id", table_name="push_tokens")
    op.drop_table("push_tokens")
    op.drop_index("ix_schedule_archives_user_id", table_name="schedule_archives")
    op.drop_table("schedule_archives")
    op.drop_index("ix_day_schedules_user_id", table_name="day_schedules")
    op.drop_table("day_schedules")
    op.drop_index("ix_notified_rides_user_id", table_name="notified_rides")
    op.drop_table("notified_rides")
    op.drop_index("ix_ride_preferences_user_id", table_name="ride_preferences")
    op.drop_table("ride_preferences")
