"""Notification schemas for API."""
from datetime import datetime
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field

NotificationPriority = Literal["low", "medium", "high", "critical"]
NotificationStatus = Literal["unread", "read", "pending", "sent", "failed"]


class NotificationCreate(BaseModel):
    """Schema for a manually created notification."""
    service_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    priority: NotificationPriority = "medium"
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NotificationSend(BaseModel):
    """Schema for a notification dispatched through the ntfy relay."""
    service_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    priority: Optional[NotificationPriority] = None  # defaults to the relay config
    config: Dict[str, Any] = Field(default_factory=dict)  # per-send overrides, e.g. priority


class NotificationUpdate(BaseModel):
    """Schema for updating a notification. Only supplied fields are applied."""
    title: Optional[str] = Field(None, min_length=1)
    message: Optional[str] = Field(None, min_length=1)
    priority: Optional[NotificationPriority] = None
    status: Optional[NotificationStatus] = None
    metadata: Optional[Dict[str, Any]] = None


class NotificationResponse(BaseModel):
    """Schema for notification in API responses."""
    id: str
    user_id: str
    service_id: str
    title: str
    message: str
    priority: str
    provider: str
    status: str
    response_data: Optional[Any] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None
    read_at: Optional[datetime] = None


class NotificationMutationResponse(BaseModel):
    message: str
    notification: NotificationResponse


class NotificationStats(BaseModel):
    """Aggregate counts over the caller's notifications."""
    total: int = 0
    unread: int = 0
    read: int = 0
    pending: int = 0
    sent: int = 0
    failed: int = 0
    high_priority: int = 0
    medium_priority: int = 0
    low_priority: int = 0
    critical_priority: int = 0
    by_service: Dict[str, int] = Field(default_factory=dict)


class ReadAllResponse(BaseModel):
    message: str
    updated: int


class RelayTestResult(BaseModel):
    status: int
    topic: str


class TestNotificationResponse(BaseModel):
    message: str
    response: RelayTestResult
