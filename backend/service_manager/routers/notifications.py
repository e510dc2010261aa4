"""Notification endpoints, including dispatch through the ntfy relay."""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import AuthContext, get_auth_context
from ..config import settings
from ..database import get_db
from ..errors import error_body, persistence_error
from ..models import Notification, Service
from ..models.notification import NOTIFICATION_PRIORITIES, NOTIFICATION_STATUSES
from ..schemas.common import MessageResponse
from ..schemas.notification import (
    NotificationCreate,
    NotificationMutationResponse,
    NotificationResponse,
    NotificationSend,
    NotificationStats,
    NotificationUpdate,
    ReadAllResponse,
    TestNotificationResponse,
)
from ..services.ntfy_client import RelayConfig, build_payload, publish_json, publish_text
from ..services.ntfy_settings import get_or_create_ntfy_config
from ..utils.db_utils import commit_with_retry, dump_json, load_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])

# Message fragments that mark a notification as a service state change
STATE_CHANGE_MARKERS = ("status changed", "service is now")

TEST_TITLE = "Personal Service Manager Test"
TEST_MESSAGE = "This is a test notification from your Personal Service Manager"


def notification_to_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        user_id=notification.user_id,
        service_id=notification.service_id,
        title=notification.title,
        message=notification.message,
        priority=notification.priority,
        provider=notification.provider,
        status=notification.status,
        response_data=load_json(notification.response_data),
        error_message=notification.error_message,
        metadata=load_json(notification.meta, {}),
        created_at=notification.created_at,
        updated_at=notification.updated_at,
        read_at=notification.read_at,
    )


def is_state_change(message: str) -> bool:
    return any(marker in message for marker in STATE_CHANGE_MARKERS)


async def _get_owned_service(db: AsyncSession, service_id: str, user_id: str) -> Service:
    result = await db.execute(
        select(Service).where(Service.id == service_id, Service.user_id == user_id)
    )
    service = result.scalar_one_or_none()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found or access denied")
    return service


async def _get_owned_notification(db: AsyncSession, notification_id: str, user_id: str) -> Notification:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


async def _commit(db: AsyncSession, message: str) -> None:
    try:
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{message}: {e}")
        raise persistence_error(message, e)


@router.post("/send", response_model=NotificationMutationResponse)
async def send_notification(
    data: NotificationSend,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Publish a notification to ntfy and store the outcome.

    A failed delivery is still stored (status ``failed``) and returned with
    200, so the caller can inspect the error.
    """
    service = await _get_owned_service(db, data.service_id, auth.user_id)
    ntfy_config = await get_or_create_ntfy_config(db, auth.user_id)

    priority = data.priority or ntfy_config.default_priority
    override = data.config.get("priority")
    # Unknown or non-string overrides fall back to the notification priority
    relay_priority = override if isinstance(override, str) and override in NOTIFICATION_PRIORITIES else priority

    payload = build_payload(
        service_id=service.id,
        title=data.title,
        message=data.message,
        priority=relay_priority,
        frontend_url=settings.frontend_url,
    )
    result = await publish_json(RelayConfig.from_model(ntfy_config), payload)

    now = datetime.utcnow()
    notification = Notification(
        user_id=auth.user_id,
        service_id=service.id,
        title=data.title,
        message=data.message,
        priority=priority,
        provider="ntfy.sh",
        status="sent" if result.delivered else "failed",
        response_data=dump_json(result.response) if result.delivered else None,
        error_message=None if result.delivered else result.error,
        meta=dump_json({
            "service_id": service.id,
            "service_name": service.name,
            "service_type": service.type,
            "user_id": auth.user_id,
            "timestamp": now.isoformat(),
            "config": data.config,
            "outcome": result.outcome,
        }),
    )
    db.add(notification)

    if is_state_change(data.message):
        service.last_notification = now

    await _commit(db, "Failed to save notification")
    await db.refresh(notification)

    if result.delivered:
        logger.info(f"Notification {notification.id} delivered to topic {ntfy_config.topic}")
        message = "Notification sent successfully"
    else:
        logger.error(f"Notification {notification.id} delivery failed ({result.outcome}): {result.error}")
        message = "Notification stored but delivery failed"

    return NotificationMutationResponse(
        message=message,
        notification=notification_to_response(notification),
    )


@router.post("/test", response_model=TestNotificationResponse)
async def send_test_notification(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Publish a fixed plain-text message to the caller's topic. Nothing is stored."""
    ntfy_config = await get_or_create_ntfy_config(db, auth.user_id)
    result = await publish_text(
        RelayConfig.from_model(ntfy_config),
        title=TEST_TITLE,
        message=TEST_MESSAGE,
        priority="medium",
    )
    if not result.delivered:
        raise HTTPException(
            status_code=502,
            detail=error_body("Failed to send test notification", result.error),
        )

    return TestNotificationResponse(
        message="Test notification sent successfully",
        response={"status": result.status_code, "topic": ntfy_config.topic},
    )


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    status: Optional[str] = None,
    priority: Optional[str] = None,
    service_id: Optional[str] = None,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's notifications, newest first."""
    query = select(Notification).where(Notification.user_id == auth.user_id)
    if status:
        query = query.where(Notification.status == status)
    if priority:
        query = query.where(Notification.priority == priority)
    if service_id:
        query = query.where(Notification.service_id == service_id)

    result = await db.execute(
        query.order_by(Notification.created_at.desc()).offset(offset).limit(limit)
    )
    return [notification_to_response(n) for n in result.scalars().all()]


@router.get("/stats", response_model=NotificationStats)
async def get_notification_stats(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Counts by status, priority and service name."""
    stats = NotificationStats()

    status_rows = await db.execute(
        select(Notification.status, func.count(Notification.id))
        .where(Notification.user_id == auth.user_id)
        .group_by(Notification.status)
    )
    for status, count in status_rows.all():
        stats.total += count
        if status in NOTIFICATION_STATUSES:
            setattr(stats, status, count)

    priority_rows = await db.execute(
        select(Notification.priority, func.count(Notification.id))
        .where(Notification.user_id == auth.user_id)
        .group_by(Notification.priority)
    )
    for priority, count in priority_rows.all():
        if priority in NOTIFICATION_PRIORITIES:
            setattr(stats, f"{priority}_priority", count)

    service_rows = await db.execute(
        select(Service.name, func.count(Notification.id))
        .join(Service, Service.id == Notification.service_id)
        .where(Notification.user_id == auth.user_id)
        .group_by(Service.id, Service.name)
    )
    by_service = {}
    for name, count in service_rows.all():
        # Services may share a name
        by_service[name] = by_service.get(name, 0) + count
    stats.by_service = by_service

    return stats


@router.put("/read-all", response_model=ReadAllResponse)
async def mark_all_read(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Move every unread notification of the caller to read."""
    now = datetime.utcnow()
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == auth.user_id, Notification.status == "unread")
        .values(status="read", read_at=now, updated_at=now)
    )
    await _commit(db, "Failed to mark all notifications as read")

    return ReadAllResponse(
        message="All notifications marked as read successfully",
        updated=result.rowcount or 0,
    )


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    notification = await _get_owned_notification(db, notification_id, auth.user_id)
    return notification_to_response(notification)


@router.post("", response_model=NotificationMutationResponse, status_code=201)
async def create_notification(
    data: NotificationCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Store a manual notification without dispatching it."""
    service = await _get_owned_service(db, data.service_id, auth.user_id)

    metadata = dict(data.metadata)
    metadata.update({
        "service_name": service.name,
        "service_type": service.type,
        "timestamp": datetime.utcnow().isoformat(),
    })
    notification = Notification(
        user_id=auth.user_id,
        service_id=service.id,
        title=data.title,
        message=data.message,
        priority=data.priority,
        provider="manual",
        status="pending",
        meta=dump_json(metadata),
    )
    db.add(notification)
    await _commit(db, "Failed to create notification")
    await db.refresh(notification)

    return NotificationMutationResponse(
        message="Notification created successfully",
        notification=notification_to_response(notification),
    )


@router.put("/{notification_id}", response_model=NotificationMutationResponse)
async def update_notification(
    notification_id: str,
    data: NotificationUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Update a notification. Omitted fields keep their stored values."""
    notification = await _get_owned_notification(db, notification_id, auth.user_id)

    update_data = data.model_dump(exclude_unset=True)
    for field in ("title", "message", "priority", "status"):
        if update_data.get(field) is not None:
            setattr(notification, field, update_data[field])
    if update_data.get("metadata") is not None:
        notification.meta = dump_json(update_data["metadata"])
    if update_data.get("status") == "read" and notification.read_at is None:
        notification.read_at = datetime.utcnow()
    notification.updated_at = datetime.utcnow()

    await _commit(db, "Failed to update notification")
    await db.refresh(notification)

    return NotificationMutationResponse(
        message="Notification updated successfully",
        notification=notification_to_response(notification),
    )


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    notification = await _get_owned_notification(db, notification_id, auth.user_id)

    await db.delete(notification)
    await _commit(db, "Failed to delete notification")

    return MessageResponse(message="Notification deleted successfully")


@router.put("/{notification_id}/read", response_model=NotificationMutationResponse)
async def mark_notification_read(
    notification_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Mark one notification read and stamp ``read_at``."""
    notification = await _get_owned_notification(db, notification_id, auth.user_id)

    now = datetime.utcnow()
    notification.status = "read"
    notification.read_at = now
    notification.updated_at = now

    await _commit(db, "Failed to mark notification as read")
    await db.refresh(notification)

    return NotificationMutationResponse(
        message="Notification marked as read successfully",
        notification=notification_to_response(notification),
    )
