"""One row per (user_id, ride_id) currently announced as ready. Rewritten wholesale every tick."""
from sqlalchemy import Column, Integer, String, UniqueConstraint

from ridealert.db.base import Base


class NotifiedRide(Base):
    __tablename__ = "notified_rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    ride_id = Column(String(64), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "ride_id", name="uq_notified_rides_user_ride"),)
