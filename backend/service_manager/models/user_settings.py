"""UserSettings model - per-user preferences."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base


class UserSettings(Base):
    """Preferences row, created lazily on first read."""

    __tablename__ = "user_settings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)
    notifications_enabled = Column(Boolean, default=True)
    email_notifications = Column(Boolean, default=False)
    push_notifications = Column(Boolean, default=True)
    theme = Column(String, default="light")  # light, dark, auto
    language = Column(String, default="zh-TW")
    timezone = Column(String, default="Asia/Taipei")
    ntfy_topic = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    profile = relationship("Profile", back_populates="settings")


# Defaults applied when a user reads settings for the first time
DEFAULT_USER_SETTINGS = {
    "notifications_enabled": True,
    "email_notifications": False,
    "push_notifications": True,
    "theme": "light",
    "language": "zh-TW",
    "timezone": "Asia/Taipei",
}
