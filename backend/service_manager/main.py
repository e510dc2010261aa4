"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import init_db, close_db
from .errors import register_exception_handlers
from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from .routers import (
    auth_router,
    services_router,
    notifications_router,
    ntfy_config_router,
    users_router,
    health_router,
)
from .utils.rate_limit import rate_limit

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "dev-secret-change-me"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info(f"Starting Personal Service Manager ({settings.environment})")
    if settings.is_production and settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is the development placeholder; set a real secret")

    await init_db()
    logger.info("Database initialized")

    yield

    await close_db()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Personal Service Manager",
        description="Track your services and get notified through ntfy",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    # Every /api route shares the per-IP limiter
    limited = [Depends(rate_limit)]
    app.include_router(health_router, dependencies=limited)
    app.include_router(auth_router, dependencies=limited)
    app.include_router(services_router, dependencies=limited)
    app.include_router(notifications_router, dependencies=limited)
    app.include_router(ntfy_config_router, dependencies=limited)
    app.include_router(users_router, dependencies=limited)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.web_port)
