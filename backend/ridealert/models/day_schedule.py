"""Live schedule for one user and one local park date.

payload: {"shows": [...], "dining": [...], "lightningLanes": {ride_id: {...}}} with the
notified / finalWarningNotified flags inline. The reminder tick rewrites it when a flag flips.
"""
from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from ridealert.db.base import Base

JSONType = JSON().with_variant(JSONB, "postgresql")


class DayScheduleRow(Base):
    __tablename__ = "day_schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    date_key = Column(String(10), nullable=False)  # YYYY-MM-DD, park-local
    payload = Column(JSONType, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "date_key", name="uq_day_schedules_user_date"),)
