"""Notification model - manual and relayed notifications."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base


NOTIFICATION_PRIORITIES = ("low", "medium", "high", "critical")
NOTIFICATION_STATUSES = ("unread", "read", "pending", "sent", "failed")


class Notification(Base):
    """A notification about a service, optionally dispatched to ntfy."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    priority = Column(String, nullable=False, default="medium")
    provider = Column(String, nullable=False, default="manual")  # manual, ntfy.sh
    status = Column(String, nullable=False, default="pending")
    response_data = Column(String, nullable=True)  # JSON relay response
    error_message = Column(String, nullable=True)
    meta = Column("metadata", String, nullable=True)  # JSON object
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    read_at = Column(DateTime, nullable=True)

    # Relationships
    owner = relationship("Profile", back_populates="notifications")
    service = relationship("Service", back_populates="notifications")
