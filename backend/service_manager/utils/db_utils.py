"""Database utility functions."""
import asyncio
import json
import logging
from typing import Any

from sqlalchemy.exc import OperationalError, InterfaceError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    "connection refused",
    "connection reset",
    "connection closed",
    "server closed",
    "database is locked",
    "timeout",
    "too many clients",
)


async def commit_with_retry(session: AsyncSession, max_retries: int = 3, base_delay: float = 0.1) -> None:
    """Commit a session, retrying transient connection and lock errors.

    Delay doubles with each attempt. Non-transient errors are re-raised
    immediately.
    """
    last_exception = None
    for attempt in range(max_retries):
        try:
            await session.commit()
            return
        except (OperationalError, InterfaceError) as e:
            error_str = str(e).lower()
            if not any(msg in error_str for msg in TRANSIENT_ERRORS):
                raise
            last_exception = e
            delay = base_delay * (2 ** attempt)
            logger.warning(f"Database transient error, retrying in {delay}s (attempt {attempt + 1}/{max_retries})")
            await asyncio.sleep(delay)
    raise last_exception


def dump_json(value: Any) -> str | None:
    """Serialize a JSON column value."""
    if value is None:
        return None
    return json.dumps(value)


def load_json(raw: str | None, default: Any = None) -> Any:
    """Decode a JSON column value, falling back to default on bad data."""
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored JSON value could not be decoded")
        return default
