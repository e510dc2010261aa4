"""Service schemas for API."""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

ServiceType = Literal["general", "http", "tcp", "script", "process", "api"]
ServiceStatus = Literal["active", "inactive", "completed", "error"]
ServicePriority = Literal["low", "medium", "high"]
LogStatus = Literal["success", "failed", "timeout", "error"]


class ServiceCreate(BaseModel):
    """Schema for creating a new service."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: ServiceType = "general"
    status: ServiceStatus = "active"
    priority: ServicePriority = "medium"
    config: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)


class ServiceUpdate(BaseModel):
    """Schema for updating a service. Only supplied fields are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[ServiceType] = None
    status: Optional[ServiceStatus] = None
    priority: Optional[ServicePriority] = None
    config: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None


class ServiceResponse(BaseModel):
    """Schema for service in API responses."""
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    type: str
    status: str
    priority: str
    config: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    last_notification: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ServiceMutationResponse(BaseModel):
    message: str
    service: ServiceResponse


class ServiceStats(BaseModel):
    """Aggregate counts over the caller's services."""
    total: int = 0
    active: int = 0
    inactive: int = 0
    completed: int = 0
    error: int = 0
    high_priority: int = 0
    medium_priority: int = 0
    low_priority: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)


class MonitoringLogCreate(BaseModel):
    """Schema for appending a monitoring log entry."""
    status: LogStatus
    response_time: Optional[int] = Field(None, ge=0)  # ms
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class MonitoringLogResponse(BaseModel):
    id: str
    service_id: str
    timestamp: datetime
    status: str
    response_time: Optional[int] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class MonitoringLogCreated(BaseModel):
    message: str
    log: MonitoringLogResponse
