"""Per-user ride alert preference: notify when the ride's wait is at or under max_wait."""
from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint, true

from ridealert.db.base import Base


class RidePreferenceRow(Base):
    __tablename__ = "ride_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    ride_id = Column(String(64), nullable=False)
    enabled = Column(Boolean, nullable=False, server_default=true())
    max_wait = Column(Integer, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "ride_id", name="uq_ride_preferences_user_ride"),)
