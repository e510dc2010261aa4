"""User profile, password, settings, account and activity endpoints."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import AuthContext, get_auth_context
from ..database import get_db
from ..errors import persistence_error
from ..models import Notification, Profile, Service, UserSettings
from ..models.user_settings import DEFAULT_USER_SETTINGS
from ..schemas.common import MessageResponse
from ..schemas.user import (
    AccountDelete,
    ActivityItem,
    ActivityPage,
    PasswordChange,
    ProfileMutationResponse,
    ProfileResponse,
    ProfileUpdate,
    SettingsMutationResponse,
    SettingsResponse,
    SettingsUpdate,
)
from ..security import get_password_hash, verify_password
from ..utils.db_utils import commit_with_retry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


async def _get_profile(db: AsyncSession, user_id: str) -> Profile:
    profile = await db.get(Profile, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


async def _commit(db: AsyncSession, message: str) -> None:
    try:
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{message}: {e}")
        raise persistence_error(message, e)


async def _get_or_create_settings(db: AsyncSession, user_id: str) -> UserSettings:
    """Return the user's settings row, creating it with defaults exactly once."""
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    user_settings = result.scalar_one_or_none()
    if user_settings:
        return user_settings

    user_settings = UserSettings(user_id=user_id, **DEFAULT_USER_SETTINGS)
    db.add(user_settings)
    await _commit(db, "Failed to create user settings")
    await db.refresh(user_settings)
    logger.info(f"Created default settings for user {user_id}")
    return user_settings


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _get_profile(db, auth.user_id)


@router.put("/profile", response_model=ProfileMutationResponse)
async def update_profile(
    data: ProfileUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Update name and/or email."""
    profile = await _get_profile(db, auth.user_id)

    if data.email is not None:
        email = data.email.strip().lower()
        if email != profile.email:
            taken = await db.execute(
                select(Profile.id).where(Profile.email == email, Profile.id != profile.id)
            )
            if taken.scalar_one_or_none():
                raise HTTPException(status_code=400, detail="Email already in use")
            profile.email = email
    if data.name is not None:
        profile.name = data.name.strip()
    profile.updated_at = datetime.utcnow()

    await _commit(db, "Failed to update profile")
    await db.refresh(profile)

    return ProfileMutationResponse(message="Profile updated successfully", profile=ProfileResponse.model_validate(profile))


@router.put("/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    profile = await _get_profile(db, auth.user_id)

    if not verify_password(data.current_password, profile.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    profile.password_hash = get_password_hash(data.new_password)
    profile.updated_at = datetime.utcnow()
    await _commit(db, "Failed to update password")

    logger.info(f"Password changed for user {auth.user_id}")
    return MessageResponse(message="Password updated successfully")


@router.get("/settings", response_model=SettingsResponse)
async def get_settings(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_create_settings(db, auth.user_id)


@router.put("/settings", response_model=SettingsMutationResponse)
async def update_settings(
    data: SettingsUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Merge supplied preferences, creating the defaults row first if needed."""
    user_settings = await _get_or_create_settings(db, auth.user_id)

    update_data = data.model_dump(exclude_unset=True)
    # An empty or null topic clears the override
    if "ntfy_topic" in update_data:
        user_settings.ntfy_topic = update_data.pop("ntfy_topic") or None
    for key, value in update_data.items():
        if value is not None:
            setattr(user_settings, key, value)
    user_settings.updated_at = datetime.utcnow()

    await _commit(db, "Failed to update settings")
    await db.refresh(user_settings)

    return SettingsMutationResponse(message="Settings updated successfully", settings=SettingsResponse.model_validate(user_settings))


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    data: Optional[AccountDelete] = Body(None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Delete the caller's account and everything it owns."""
    if data is None or not data.password:
        raise HTTPException(status_code=400, detail="Password is required to delete account")

    profile = await _get_profile(db, auth.user_id)
    if not verify_password(data.password, profile.password_hash):
        raise HTTPException(status_code=401, detail="Password is incorrect")

    await db.delete(profile)
    await _commit(db, "Failed to delete account")

    logger.info(f"Deleted account {auth.user_id}")
    return MessageResponse(message="Account deleted successfully")


@router.get("/activity", response_model=ActivityPage)
async def get_activity(
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Recent services and notifications merged into one timeline."""
    # The newest limit+offset rows of each source cover the requested window
    window = limit + offset

    services = await db.execute(
        select(Service)
        .where(Service.user_id == auth.user_id)
        .order_by(Service.updated_at.desc())
        .limit(window)
    )
    notifications = await db.execute(
        select(Notification)
        .where(Notification.user_id == auth.user_id)
        .order_by(Notification.created_at.desc())
        .limit(window)
    )

    activity = [
        ActivityItem(
            type="service",
            action=s.status,
            title=s.name,
            timestamp=s.updated_at,
            details=f"Service {s.status.lower()}",
        )
        for s in services.scalars().all()
    ]
    activity.extend(
        ActivityItem(
            type="notification",
            action=n.status,
            title=n.title,
            timestamp=n.created_at,
            details=n.message,
        )
        for n in notifications.scalars().all()
    )
    activity.sort(key=lambda item: item.timestamp, reverse=True)

    service_count = await db.scalar(
        select(func.count(Service.id)).where(Service.user_id == auth.user_id)
    )
    notification_count = await db.scalar(
        select(func.count(Notification.id)).where(Notification.user_id == auth.user_id)
    )

    return ActivityPage(
        activity=activity[offset:offset + limit],
        total=(service_count or 0) + (notification_count or 0),
        limit=limit,
        offset=offset,
    )
