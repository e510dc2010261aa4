"""Periodic full refetch of registered stores.

Local caches can go stale when another client changes the same account;
a background job reloads every registered store on a fixed interval.
"""
import logging
from typing import List, Optional

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .api import ApiError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60


class StoreRefresher:
    """Reloads stores exposing an async ``refresh()`` on a schedule."""

    def __init__(self, interval_seconds: int = DEFAULT_INTERVAL_SECONDS):
        self.interval_seconds = interval_seconds
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._stores: List = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def register(self, store):
        self._stores.append(store)

    def start(self):
        """Start the scheduler. Must be called with an event loop running."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.refresh_all,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id="refresh_stores",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        self._running = True
        logger.info(f"Store refresher started ({self.interval_seconds}s interval)")

    def stop(self):
        if self.scheduler:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
        self._running = False
        logger.info("Store refresher stopped")

    async def refresh_all(self) -> int:
        """Refresh every store, returning how many succeeded."""
        refreshed = 0
        for store in self._stores:
            try:
                await store.refresh()
                refreshed += 1
            except (ApiError, httpx.HTTPError) as e:
                logger.warning(f"Refresh of {store.__class__.__name__} failed: {e}")
        return refreshed
