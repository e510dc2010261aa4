"""Service CRUD, search, stats and monitoring log endpoints."""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import AuthContext, get_auth_context
from ..database import get_db
from ..errors import persistence_error
from ..models import MonitoringLog, Service
from ..models.service import SERVICE_PRIORITIES, SERVICE_STATUSES
from ..schemas.common import MessageResponse
from ..schemas.service import (
    MonitoringLogCreate,
    MonitoringLogCreated,
    MonitoringLogResponse,
    ServiceCreate,
    ServiceMutationResponse,
    ServiceResponse,
    ServiceStats,
    ServiceUpdate,
)
from ..utils.db_utils import commit_with_retry, dump_json, load_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services", tags=["services"])


def service_to_response(service: Service) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        user_id=service.user_id,
        name=service.name,
        description=service.description,
        type=service.type,
        status=service.status,
        priority=service.priority,
        config=load_json(service.config, {}),
        metadata=load_json(service.meta, {}),
        tags=load_json(service.tags, []),
        last_notification=service.last_notification,
        created_at=service.created_at,
        updated_at=service.updated_at,
    )


def log_to_response(log: MonitoringLog) -> MonitoringLogResponse:
    return MonitoringLogResponse(
        id=log.id,
        service_id=log.service_id,
        timestamp=log.timestamp,
        status=log.status,
        response_time=log.response_time,
        error_message=log.error_message,
        metadata=load_json(log.meta, {}),
    )


async def get_owned_service(db: AsyncSession, service_id: str, user_id: str) -> Service:
    """Load a service owned by the caller, or 404.

    Missing and foreign services are indistinguishable to the caller.
    """
    result = await db.execute(
        select(Service).where(Service.id == service_id, Service.user_id == user_id)
    )
    service = result.scalar_one_or_none()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


def _parse_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


@router.get("", response_model=List[ServiceResponse])
async def list_services(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's services, newest first."""
    result = await db.execute(
        select(Service)
        .where(Service.user_id == auth.user_id)
        .order_by(Service.created_at.desc())
    )
    return [service_to_response(s) for s in result.scalars().all()]


@router.get("/search", response_model=List[ServiceResponse])
async def search_services(
    q: Optional[str] = None,
    type: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    tags: Optional[str] = Query(None, description="Comma separated; all must match"),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Search services by text, equality filters and tags."""
    query = select(Service).where(Service.user_id == auth.user_id)

    if q:
        pattern = f"%{q}%"
        query = query.where(or_(Service.name.ilike(pattern), Service.description.ilike(pattern)))
    if type:
        query = query.where(Service.type == type)
    if status:
        query = query.where(Service.status == status)
    if priority:
        query = query.where(Service.priority == priority)

    result = await db.execute(query.order_by(Service.created_at.desc()))
    services = [service_to_response(s) for s in result.scalars().all()]

    wanted = _parse_tags(tags)
    if wanted:
        services = [s for s in services if all(tag in s.tags for tag in wanted)]

    return services


@router.get("/stats", response_model=ServiceStats)
async def get_service_stats(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Counts by status, priority and type."""
    stats = ServiceStats()

    status_rows = await db.execute(
        select(Service.status, func.count(Service.id))
        .where(Service.user_id == auth.user_id)
        .group_by(Service.status)
    )
    for status, count in status_rows.all():
        stats.total += count
        if status in SERVICE_STATUSES:
            setattr(stats, status, count)

    priority_rows = await db.execute(
        select(Service.priority, func.count(Service.id))
        .where(Service.user_id == auth.user_id)
        .group_by(Service.priority)
    )
    for priority, count in priority_rows.all():
        if priority in SERVICE_PRIORITIES:
            setattr(stats, f"{priority}_priority", count)

    type_rows = await db.execute(
        select(Service.type, func.count(Service.id))
        .where(Service.user_id == auth.user_id)
        .group_by(Service.type)
    )
    stats.by_type = {service_type: count for service_type, count in type_rows.all()}

    return stats


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    service = await get_owned_service(db, service_id, auth.user_id)
    return service_to_response(service)


@router.post("", response_model=ServiceMutationResponse, status_code=201)
async def create_service(
    data: ServiceCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Create a new service."""
    service = Service(
        user_id=auth.user_id,
        name=data.name,
        description=data.description,
        type=data.type,
        status=data.status,
        priority=data.priority,
        config=dump_json(data.config),
        meta=dump_json(data.metadata),
        tags=dump_json(data.tags),
    )
    db.add(service)
    try:
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create service for user {auth.user_id}: {e}")
        raise persistence_error("Failed to create service", e)
    await db.refresh(service)

    logger.info(f"Created service {service.id} ({service.name})")
    return ServiceMutationResponse(
        message="Service created successfully",
        service=service_to_response(service),
    )


@router.put("/{service_id}", response_model=ServiceMutationResponse)
async def update_service(
    service_id: str,
    data: ServiceUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Update a service. Omitted fields keep their stored values."""
    service = await get_owned_service(db, service_id, auth.user_id)

    update_data = data.model_dump(exclude_unset=True)
    for field in ("name", "type", "status", "priority"):
        # These columns are NOT NULL; an explicit null leaves them unchanged
        if field in update_data and update_data[field] is not None:
            setattr(service, field, update_data[field])
    if "description" in update_data:
        service.description = update_data["description"]
    if update_data.get("config") is not None:
        service.config = dump_json(update_data["config"])
    if update_data.get("metadata") is not None:
        service.meta = dump_json(update_data["metadata"])
    if update_data.get("tags") is not None:
        service.tags = dump_json(update_data["tags"])
    service.updated_at = datetime.utcnow()

    try:
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update service {service_id}: {e}")
        raise persistence_error("Failed to update service", e)
    await db.refresh(service)

    return ServiceMutationResponse(
        message="Service updated successfully",
        service=service_to_response(service),
    )


@router.delete("/{service_id}", response_model=MessageResponse)
async def delete_service(
    service_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Delete a service along with its logs and notifications."""
    service = await get_owned_service(db, service_id, auth.user_id)

    try:
        await db.delete(service)
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to delete service {service_id}: {e}")
        raise persistence_error("Failed to delete service", e)

    logger.info(f"Deleted service {service_id}")
    return MessageResponse(message="Service deleted successfully")


@router.get("/{service_id}/logs", response_model=List[MonitoringLogResponse])
async def list_monitoring_logs(
    service_id: str,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Monitoring logs for a service, newest first."""
    await get_owned_service(db, service_id, auth.user_id)

    result = await db.execute(
        select(MonitoringLog)
        .where(MonitoringLog.service_id == service_id)
        .order_by(MonitoringLog.timestamp.desc())
        .offset(offset)
        .limit(limit)
    )
    return [log_to_response(log) for log in result.scalars().all()]


@router.post("/{service_id}/logs", response_model=MonitoringLogCreated, status_code=201)
async def add_monitoring_log(
    service_id: str,
    data: MonitoringLogCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Append a monitoring result. Logs are never modified afterwards."""
    await get_owned_service(db, service_id, auth.user_id)

    log = MonitoringLog(
        service_id=service_id,
        status=data.status,
        response_time=data.response_time,
        error_message=data.error_message,
        meta=dump_json(data.metadata),
    )
    db.add(log)
    try:
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to add monitoring log for service {service_id}: {e}")
        raise persistence_error("Failed to add monitoring log", e)
    await db.refresh(log)

    return MonitoringLogCreated(
        message="Monitoring log added successfully",
        log=log_to_response(log),
    )
