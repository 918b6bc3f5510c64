"""Device push token for a user (Expo push token or APNs device token). At most one per user."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from ridealert.db.base import Base


class PushToken(Base):
    __tablename__ = "push_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    device_token = Column(String(256), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
