"""Service model - things a user tracks."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base


SERVICE_STATUSES = ("active", "inactive", "completed", "error")
SERVICE_PRIORITIES = ("low", "medium", "high")


class Service(Base):
    """A tracked service - HTTP endpoint, script, process, etc."""

    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String, nullable=True)
    type = Column(String, nullable=False, default="general")
    status = Column(String, nullable=False, default="active")
    priority = Column(String, nullable=False, default="medium")
    config = Column(String, nullable=True)  # JSON object
    meta = Column("metadata", String, nullable=True)  # JSON object
    tags = Column(String, nullable=True)  # JSON list of strings
    last_notification = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("Profile", back_populates="services")
    logs = relationship("MonitoringLog", back_populates="service", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="service", cascade="all, delete-orphan")
