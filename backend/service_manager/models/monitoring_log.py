"""MonitoringLog model - append-only check results for a service."""
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base


class MonitoringLog(Base):
    """A single monitoring result. Never updated once written."""

    __tablename__ = "monitoring_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    service_id = Column(String(36), ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    timestamp = Column(DateTime, default=datetime.utcnow, index=True)
    status = Column(String, nullable=False)
    response_time = Column(Integer, nullable=True)  # ms
    error_message = Column(String, nullable=True)
    meta = Column("metadata", String, nullable=True)  # JSON object

    service = relationship("Service", back_populates="logs")
