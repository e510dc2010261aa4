"""NtfyConfig model - per-user push relay settings."""
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base


class NtfyConfig(Base):
    """Relay endpoint and credentials used when sending notifications."""

    __tablename__ = "ntfy_configs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)
    url = Column(String, nullable=False)
    topic = Column(String, nullable=False)
    default_priority = Column(String, nullable=False, default="medium")
    rate_limit = Column(Integer, default=60)  # requests per minute
    timeout = Column(Integer, default=30000)  # ms
    username = Column(String, nullable=True)
    password = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    profile = relationship("Profile", back_populates="ntfy_config")
