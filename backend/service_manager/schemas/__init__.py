"""Pydantic schemas for API request/response models."""
from .common import MessageResponse
from .service import (
    ServiceCreate,
    ServiceUpdate,
    ServiceResponse,
    ServiceMutationResponse,
    ServiceStats,
    MonitoringLogCreate,
    MonitoringLogResponse,
    MonitoringLogCreated,
)
from .notification import (
    NotificationCreate,
    NotificationSend,
    NotificationUpdate,
    NotificationResponse,
    NotificationMutationResponse,
    NotificationStats,
    ReadAllResponse,
    TestNotificationResponse,
)
from .ntfy import (
    NtfyConfigResponse,
    NtfyConfigUpdate,
    NtfyConfigEnvelope,
    NtfyConfigUpdateRequest,
    NtfyConfigMutationResponse,
)
from .user import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    ProfileResponse,
    ProfileUpdate,
    ProfileMutationResponse,
    PasswordChange,
    AccountDelete,
    SettingsResponse,
    SettingsUpdate,
    SettingsMutationResponse,
    ActivityItem,
    ActivityPage,
)

__all__ = [
    "MessageResponse",
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceResponse",
    "ServiceMutationResponse",
    "ServiceStats",
    "MonitoringLogCreate",
    "MonitoringLogResponse",
    "MonitoringLogCreated",
    "NotificationCreate",
    "NotificationSend",
    "NotificationUpdate",
    "NotificationResponse",
    "NotificationMutationResponse",
    "NotificationStats",
    "ReadAllResponse",
    "TestNotificationResponse",
    "NtfyConfigResponse",
    "NtfyConfigUpdate",
    "NtfyConfigEnvelope",
    "NtfyConfigUpdateRequest",
    "NtfyConfigMutationResponse",
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "ProfileResponse",
    "ProfileUpdate",
    "ProfileMutationResponse",
    "PasswordChange",
    "AccountDelete",
    "SettingsResponse",
    "SettingsUpdate",
    "SettingsMutationResponse",
    "ActivityItem",
    "ActivityPage",
]
