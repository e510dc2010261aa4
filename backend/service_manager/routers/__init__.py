"""API routers."""
from .auth import router as auth_router
from .services import router as services_router
from .notifications import router as notifications_router
from .ntfy_config import router as ntfy_config_router
from .users import router as users_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "services_router",
    "notifications_router",
    "ntfy_config_router",
    "users_router",
    "health_router",
]
