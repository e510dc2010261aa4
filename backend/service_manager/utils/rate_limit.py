"""Sliding-window request limiter keyed by client IP."""
import time
from collections import deque
from typing import Deque, Dict

from fastapi import HTTPException, Request

from ..config import settings
from ..errors import error_body
from ..middleware.request_logging import client_ip

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


class RateLimiter:
    """Allow at most ``max_requests`` per key inside a rolling window."""

    def __init__(self, max_requests: int, window_seconds: float):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = time.monotonic()

    def is_allowed(self, key: str) -> bool:
        now = time.monotonic()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits.setdefault(key, deque())
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if len(hits) >= self.max_requests:
            if not hits:
                del self._hits[key]
            return False
        hits.append(now)
        return True

    def _sweep(self, now: float) -> None:
        """Forget keys with no hit inside the current window."""
        stale = [
            key for key, hits in self._hits.items()
            if not hits or now - hits[-1] >= self.window_seconds
        ]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def guard(self, key: str) -> None:
        if not self.is_allowed(key):
            raise HTTPException(status_code=429, detail=error_body(RATE_LIMIT_MESSAGE))

    def tracked_keys(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        self._hits.clear()


limiter = RateLimiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_ms / 1000,
)


def limiter_key(request: Request) -> str:
    """Peer address, or the forwarded client when running behind a trusted proxy."""
    if settings.trust_proxy:
        return client_ip(request)
    return request.client.host if request.client else "unknown"


async def rate_limit(request: Request) -> None:
    """Router dependency applying the process-wide limiter."""
    limiter.guard(limiter_key(request))
