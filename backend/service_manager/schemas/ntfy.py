"""ntfy relay configuration schemas.

Keys use the camelCase names the browser client sends and reads.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field


class NtfyConfigResponse(BaseModel):
    url: str
    topic: str
    default_priority: str = Field(alias="defaultPriority")
    rate_limit: int = Field(alias="rateLimit")
    timeout: int  # ms
    username: Optional[str] = None
    has_password: bool = False

    class Config:
        populate_by_name = True


class NtfyConfigUpdate(BaseModel):
    url: Optional[str] = Field(None, min_length=1)
    topic: Optional[str] = Field(None, min_length=1, pattern=r"^[A-Za-z0-9_-]+$")
    default_priority: Optional[Literal["low", "medium", "high", "critical"]] = Field(None, alias="defaultPriority")
    rate_limit: Optional[int] = Field(None, alias="rateLimit", ge=1, le=10000)
    timeout: Optional[int] = Field(None, ge=100, le=120000)
    username: Optional[str] = None
    password: Optional[str] = None

    class Config:
        populate_by_name = True


class NtfyConfigEnvelope(BaseModel):
    config: NtfyConfigResponse


class NtfyConfigUpdateRequest(BaseModel):
    config: NtfyConfigUpdate


class NtfyConfigMutationResponse(BaseModel):
    message: str
    config: NtfyConfigResponse
