"""Local cache of the caller's services.

After every mutation the cached list is patched with the entity the server
returned and the stats are fetched again, so counts always come from the
server.
"""
import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import httpx

from .api import ApiError, ServiceManagerAPI

logger = logging.getLogger(__name__)

SERVICE_STATUSES = ("active", "inactive", "completed", "error")

EMPTY_STATS = {
    "total": 0,
    "active": 0,
    "inactive": 0,
    "completed": 0,
    "error": 0,
    "high_priority": 0,
    "medium_priority": 0,
    "low_priority": 0,
    "by_type": {},
}


class ServicesStore:
    def __init__(self, api: ServiceManagerAPI):
        self.api = api
        self.services: List[dict] = []
        self.stats: dict = dict(EMPTY_STATS)
        self.loading = False
        self.error: Optional[str] = None

    # Derived views

    @property
    def total_services(self) -> int:
        return len(self.services)

    @property
    def active_services(self) -> int:
        return sum(1 for s in self.services if s["status"] == "active")

    @property
    def inactive_services(self) -> int:
        return sum(1 for s in self.services if s["status"] == "inactive")

    @property
    def services_by_type(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for service in self.services:
            counts[service["type"]] = counts.get(service["type"], 0) + 1
        return counts

    @property
    def services_by_status(self) -> Dict[str, int]:
        counts = {status: 0 for status in SERVICE_STATUSES}
        for service in self.services:
            counts[service["status"]] = counts.get(service["status"], 0) + 1
        return counts

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

    async def fetch_services(self) -> List[dict]:
        async with self._action("Failed to fetch services"):
            self.services = await self.api.get("/services")
            await self.fetch_stats()
        return self.services

    async def fetch_stats(self) -> dict:
        try:
            self.stats = await self.api.get("/services/stats")
        except ApiError as e:
            self.error = e.message or "Failed to fetch service stats"
            raise
        return self.stats

    async def refresh(self):
        await self.fetch_services()

    async def create_service(self, service_data: dict) -> dict:
        async with self._action("Failed to create service"):
            data = await self.api.post("/services", json=service_data)
            service = data["service"]
            self.services.insert(0, service)
            await self.fetch_stats()
        return service

    async def update_service(self, service_id: str, update_data: dict) -> dict:
        async with self._action("Failed to update service"):
            data = await self.api.put(f"/services/{service_id}", json=update_data)
            service = data["service"]
            self._replace(service)
            await self.fetch_stats()
        return service

    async def delete_service(self, service_id: str):
        async with self._action("Failed to delete service"):
            await self.api.delete(f"/services/{service_id}")
            self.services = [s for s in self.services if s["id"] != service_id]
            await self.fetch_stats()

    async def add_monitoring_log(self, service_id: str, log_data: dict) -> dict:
        async with self._action("Failed to add monitoring log"):
            data = await self.api.post(f"/services/{service_id}/logs", json=log_data)
        return data["log"]

    def search_services(
        self,
        query: str = "",
        type: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> List[dict]:
        """Filter the cached list the same way the server's search does."""
        query = (query or "").lower()
        if not query and not any((type, status, priority, tags)):
            return list(self.services)

        def matches(service: dict) -> bool:
            if query:
                name = service["name"].lower()
                description = (service.get("description") or "").lower()
                if query not in name and query not in description:
                    return False
            if type and service["type"] != type:
                return False
            if status and service["status"] != status:
                return False
            if priority and service["priority"] != priority:
                return False
            if tags and not all(tag in service.get("tags", []) for tag in tags):
                return False
            return True

        return [s for s in self.services if matches(s)]

    def clear_error(self):
        self.error = None

    def _replace(self, service: dict):
        for index, existing in enumerate(self.services):
            if existing["id"] == service["id"]:
                self.services[index] = service
                return
        self.services.insert(0, service)
