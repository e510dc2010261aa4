"""Per-user ntfy relay configuration lookup."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models import NtfyConfig
from ..utils.db_utils import commit_with_retry

logger = logging.getLogger(__name__)


async def get_or_create_ntfy_config(db: AsyncSession, user_id: str) -> NtfyConfig:
    """Return the user's relay config, persisting process defaults when absent."""
    result = await db.execute(select(NtfyConfig).where(NtfyConfig.user_id == user_id))
    config = result.scalar_one_or_none()
    if config:
        return config

    config = NtfyConfig(
        user_id=user_id,
        url=settings.ntfy_url,
        topic=settings.ntfy_topic,
        default_priority=settings.ntfy_default_priority,
        rate_limit=settings.ntfy_rate_limit,
        timeout=settings.ntfy_timeout_ms,
    )
    db.add(config)
    await commit_with_retry(db)
    await db.refresh(config)
    logger.info(f"Created default ntfy config for user {user_id}")
    return config
