"""Per-user ntfy relay configuration endpoints."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import AuthContext, get_auth_context
from ..database import get_db
from ..errors import persistence_error
from ..models import NtfyConfig
from ..schemas.ntfy import (
    NtfyConfigEnvelope,
    NtfyConfigMutationResponse,
    NtfyConfigResponse,
    NtfyConfigUpdateRequest,
)
from ..services.ntfy_settings import get_or_create_ntfy_config
from ..utils.db_utils import commit_with_retry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ntfy-config", tags=["ntfy"])


def ntfy_config_to_response(config: NtfyConfig) -> NtfyConfigResponse:
    """Serialize a relay config. The password itself is never returned."""
    return NtfyConfigResponse(
        url=config.url,
        topic=config.topic,
        default_priority=config.default_priority,
        rate_limit=config.rate_limit,
        timeout=config.timeout,
        username=config.username,
        has_password=bool(config.password),
    )


@router.get("", response_model=NtfyConfigEnvelope)
async def get_ntfy_config(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    config = await get_or_create_ntfy_config(db, auth.user_id)
    return NtfyConfigEnvelope(config=ntfy_config_to_response(config))


@router.put("", response_model=NtfyConfigMutationResponse)
async def update_ntfy_config(
    data: NtfyConfigUpdateRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Merge the supplied keys into the caller's relay config."""
    config = await get_or_create_ntfy_config(db, auth.user_id)

    update_data = data.config.model_dump(exclude_unset=True)
    for field in ("url", "topic", "default_priority", "rate_limit", "timeout"):
        if update_data.get(field) is not None:
            setattr(config, field, update_data[field])
    # Credentials may be cleared with an explicit null or empty string
    if "username" in update_data:
        config.username = update_data["username"] or None
    if "password" in update_data:
        config.password = update_data["password"] or None

    try:
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update ntfy config for user {auth.user_id}: {e}")
        raise persistence_error("Failed to update ntfy configuration", e)
    await db.refresh(config)

    return NtfyConfigMutationResponse(
        message="Ntfy configuration updated successfully",
        config=ntfy_config_to_response(config),
    )
