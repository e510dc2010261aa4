"""Local cache of the caller's notifications and relay config."""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import httpx

from .api import ApiError, ServiceManagerAPI

logger = logging.getLogger(__name__)

RECENT_COUNT = 10

EMPTY_STATS = {
    "total": 0,
    "unread": 0,
    "read": 0,
    "pending": 0,
    "sent": 0,
    "failed": 0,
    "high_priority": 0,
    "medium_priority": 0,
    "low_priority": 0,
    "critical_priority": 0,
    "by_service": {},
}


class NotificationsStore:
    def __init__(self, api: ServiceManagerAPI):
        self.api = api
        self.notifications: List[dict] = []
        self.stats: dict = dict(EMPTY_STATS)
        self.ntfy_config: Optional[dict] = None
        self.loading = False
        self.error: Optional[str] = None
        self._last_query: dict = {}

    # Derived views

    @property
    def unread_notifications(self) -> List[dict]:
        return [n for n in self.notifications if n["status"] == "unread"]

    @property
    def recent_notifications(self) -> List[dict]:
        return self.notifications[:RECENT_COUNT]

    def notifications_by_service(self, service_id: str) -> List[dict]:
        return [n for n in self.notifications if n["service_id"] == service_id]

    @property
    def high_priority_notifications(self) -> List[dict]:
        return [n for n in self.notifications if n["priority"] in ("high", "critical")]

    @property
    def failed_notifications(self) -> List[dict]:
        return [n for n in self.notifications if n["status"] == "failed"]

    @property
    def has_unread(self) -> bool:
        return self.stats.get("unread", 0) > 0

    @property
    def has_failed(self) -> bool:
        return self.stats.get("failed", 0) > 0

    # Actions

    @asynccontextmanager
    async def _action(self, failure_message: str):
        self.loading = True
        self.error = None
        try:
            yield
        except ApiError as e:
            self.error = e.message or failure_message
            raise
        except httpx.HTTPError as e:
            self.error = str(e) or failure_message
            raise
        finally:
            self.loading = False

    async def fetch_notifications(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        service_id: Optional[str] = None,
    ) -> List[dict]:
        params = {
            "limit": limit,
            "offset": offset,
            "status": status,
            "priority": priority,
            "service_id": service_id,
        }
        async with self._action("Failed to fetch notifications"):
            self.notifications = await self.api.get("/notifications", params=params)
            self._last_query = params
            await self.fetch_stats()
        return self.notifications

    async def fetch_stats(self) -> dict:
        try:
            self.stats = await self.api.get("/notifications/stats")
        except ApiError as e:
            self.error = e.message or "Failed to fetch notification stats"
            raise
        return self.stats

    async def refresh(self):
        await self.fetch_notifications(**self._last_query)

    async def fetch_ntfy_config(self) -> dict:
        async with self._action("Failed to fetch ntfy configuration"):
            data = await self.api.get("/ntfy-config")
            self.ntfy_config = data["config"]
        return self.ntfy_config

    async def create_notification(self, notification_data: dict) -> dict:
        async with self._action("Failed to create notification"):
            data = await self.api.post("/notifications", json=notification_data)
            notification = data["notification"]
            self.notifications.insert(0, notification)
            await self.fetch_stats()
        return notification

    async def send_notification(self, notification_data: dict) -> dict:
        """Dispatch through the relay. A failed delivery still comes back stored."""
        async with self._action("Failed to send notification"):
            data = await self.api.post("/notifications/send", json=notification_data)
            notification = data["notification"]
            self.notifications.insert(0, notification)
            await self.fetch_stats()
        return notification

    async def update_notification(self, notification_id: str, update_data: dict) -> dict:
        async with self._action("Failed to update notification"):
            data = await self.api.put(f"/notifications/{notification_id}", json=update_data)
            notification = data["notification"]
            self._replace(notification)
            await self.fetch_stats()
        return notification

    async def delete_notification(self, notification_id: str):
        async with self._action("Failed to delete notification"):
            await self.api.delete(f"/notifications/{notification_id}")
            self.notifications = [n for n in self.notifications if n["id"] != notification_id]
            await self.fetch_stats()

    async def mark_as_read(self, notification_id: str) -> dict:
        async with self._action("Failed to mark notification as read"):
            data = await self.api.put(f"/notifications/{notification_id}/read")
            notification = data["notification"]
            self._replace(notification)
            await self.fetch_stats()
        return notification

    async def mark_all_as_read(self) -> int:
        """Bulk read, then reload the list since the server returns no rows."""
        async with self._action("Failed to mark all notifications as read"):
            data = await self.api.put("/notifications/read-all")
            self.notifications = await self.api.get("/notifications", params=self._last_query)
            await self.fetch_stats()
        return data["updated"]

    async def update_ntfy_config(self, changes: dict) -> dict:
        async with self._action("Failed to update ntfy configuration"):
            data = await self.api.put("/ntfy-config", json={"config": changes})
            self.ntfy_config = data["config"]
        return self.ntfy_config

    def filter_notifications(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        service_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[dict]:
        search = (search or "").strip().lower()

        def matches(notification: dict) -> bool:
            if status and notification["status"] != status:
                return False
            if priority and notification["priority"] != priority:
                return False
            if service_id and notification["service_id"] != service_id:
                return False
            if search:
                return (
                    search in notification["title"].lower()
                    or search in notification["message"].lower()
                )
            return True

        return [n for n in self.notifications if matches(n)]

    def clear_error(self):
        self.error = None

    def _replace(self, notification: dict):
        for index, existing in enumerate(self.notifications):
            if existing["id"] == notification["id"]:
                self.notifications[index] = notification
                return
        self.notifications.insert(0, notification)
