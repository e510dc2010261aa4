"""User, auth and settings schemas for API."""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthUser(BaseModel):
    id: str
    email: str
    name: str


class AuthResponse(BaseModel):
    message: str
    user: AuthUser
    token: str


class ProfileResponse(BaseModel):
    """Profile as exposed over the API. The password hash is never included."""
    id: str
    email: str
    name: str
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)


class ProfileMutationResponse(BaseModel):
    message: str
    profile: ProfileResponse


class PasswordChange(BaseModel):
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6)

    class Config:
        populate_by_name = True


class AccountDelete(BaseModel):
    password: Optional[str] = None


class SettingsResponse(BaseModel):
    id: str
    user_id: str
    notifications_enabled: bool
    email_notifications: bool
    push_notifications: bool
    theme: str
    language: str
    timezone: str
    ntfy_topic: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    notifications_enabled: Optional[bool] = None
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    theme: Optional[Literal["light", "dark", "auto"]] = None
    language: Optional[str] = Field(None, min_length=2, max_length=16)
    timezone: Optional[str] = Field(None, min_length=1, max_length=64)
    ntfy_topic: Optional[str] = Field(None, pattern=r"^[A-Za-z0-9_-]*$")


class SettingsMutationResponse(BaseModel):
    message: str
    settings: SettingsResponse


class ActivityItem(BaseModel):
    type: Literal["service", "notification"]
    action: str
    title: str
    timestamp: datetime
    details: str


class ActivityPage(BaseModel):
    activity: List[ActivityItem]
    total: int
    limit: int
    offset: int
