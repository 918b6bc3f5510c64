"""Immutable snapshot of a past day's schedule, written once by the midnight sweep."""
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from ridealert.db.base import Base
from ridealert.models.day_schedule import JSONType


class ScheduleArchive(Base):
    __tablename__ = "schedule_archives"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    date_key = Column(String(10), nullable=False)
    payload = Column(JSONType, nullable=False)
    archived_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "date_key", name="uq_schedule_archives_user_date"),)
