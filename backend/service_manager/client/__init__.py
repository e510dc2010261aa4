"""Async client-side resource stores mirroring the REST API."""
from .api import ApiError, ServiceManagerAPI
from .services_store import ServicesStore
from .notifications_store import NotificationsStore
from .refresher import StoreRefresher

__all__ = [
    "ApiError",
    "ServiceManagerAPI",
    "ServicesStore",
    "NotificationsStore",
    "StoreRefresher",
]
