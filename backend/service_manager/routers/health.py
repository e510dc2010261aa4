"""Health and database connectivity endpoints."""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models import Profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

SERVICE_NAME = "personal-service-manager-backend"
VERSION = "1.0.0"


@router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "service": SERVICE_NAME,
        "version": VERSION,
    }


@router.get("/test-db")
async def test_database(db: AsyncSession = Depends(get_db)):
    """Run a trivial count query to prove the database answers."""
    try:
        await db.scalar(select(func.count(Profile.id)))
    except SQLAlchemyError as e:
        logger.error(f"Database connectivity check failed: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": "Database connection failed",
                "error": str(e) if settings.expose_error_details else "Database error",
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    return {
        "status": "connected",
        "message": "Database connection successful",
        "timestamp": datetime.utcnow().isoformat(),
    }
