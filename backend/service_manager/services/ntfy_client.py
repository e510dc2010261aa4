"""ntfy.sh publishing client.

Every publish is attempted exactly once. Transport and HTTP failures are
reported through ``DispatchResult`` rather than raised, so callers can
store a failed delivery as data.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

PRIORITY_MAP = {
    "critical": 5,
    "high": 5,
    "medium": 3,
    "low": 1,
}

DELIVERED = "delivered"
REJECTED = "rejected"        # relay answered with a non-2xx status
UNREACHABLE = "unreachable"  # connection or protocol failure
TIMEOUT = "timeout"


@dataclass
class RelayConfig:
    """Where and how to publish."""
    url: str
    topic: str
    timeout: float = 30.0  # seconds
    auth: Optional[Tuple[str, str]] = None

    @property
    def endpoint(self) -> str:
        return f"{self.url.rstrip('/')}/{self.topic}"

    @classmethod
    def from_model(cls, config) -> "RelayConfig":
        """Build from an ``NtfyConfig`` row (timeout stored in ms)."""
        auth = None
        if config.username and config.password:
            auth = (config.username, config.password)
        return cls(
            url=config.url,
            topic=config.topic,
            timeout=(config.timeout or 30000) / 1000,
            auth=auth,
        )


@dataclass
class NtfyPayload:
    title: str
    message: str
    priority: int = 3
    tags: List[str] = field(default_factory=list)
    click: Optional[str] = None


@dataclass
class DispatchResult:
    outcome: str
    status_code: Optional[int] = None
    response: Any = None
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.outcome == DELIVERED


def priority_to_ntfy(priority: Optional[str]) -> int:
    """Map a notification priority name onto ntfy's 1-5 scale."""
    return PRIORITY_MAP.get(str(priority or "").lower(), 3)


def build_payload(
    service_id: str,
    title: str,
    message: str,
    priority: str,
    frontend_url: str,
) -> NtfyPayload:
    return NtfyPayload(
        title=title,
        message=message,
        priority=priority_to_ntfy(priority),
        tags=[f"service-{service_id}", f"priority-{priority}"],
        click=f"{frontend_url.rstrip('/')}/services/{service_id}",
    )


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


async def _post(config: RelayConfig, client: Optional[httpx.AsyncClient], **kwargs) -> DispatchResult:
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=config.timeout)
    try:
        response = await client.post(
            config.endpoint,
            auth=config.auth,
            timeout=config.timeout,
            **kwargs,
        )
    except httpx.TimeoutException as e:
        logger.warning(f"ntfy publish to {config.endpoint} timed out after {config.timeout}s")
        return DispatchResult(outcome=TIMEOUT, error=f"Relay timed out: {e}")
    except httpx.HTTPError as e:
        logger.error(f"ntfy relay {config.endpoint} unreachable: {e}")
        return DispatchResult(outcome=UNREACHABLE, error=str(e) or e.__class__.__name__)
    finally:
        if owns_client:
            await client.aclose()

    body = _decode_body(response)
    if response.is_success:
        logger.info(f"ntfy publish to {config.endpoint} accepted ({response.status_code})")
        return DispatchResult(outcome=DELIVERED, status_code=response.status_code, response=body)

    logger.warning(f"ntfy relay rejected publish with {response.status_code}")
    return DispatchResult(
        outcome=REJECTED,
        status_code=response.status_code,
        response=body,
        error=f"Relay responded with status {response.status_code}",
    )


async def publish_json(
    config: RelayConfig,
    payload: NtfyPayload,
    client: Optional[httpx.AsyncClient] = None,
) -> DispatchResult:
    """Publish a structured notification as a JSON body."""
    body = {
        "topic": config.topic,
        "title": payload.title,
        "message": payload.message,
        "priority": payload.priority,
        "tags": payload.tags,
    }
    if payload.click:
        body["click"] = payload.click
    return await _post(config, client, json=body)


async def publish_text(
    config: RelayConfig,
    title: str,
    message: str,
    priority: str = "medium",
    client: Optional[httpx.AsyncClient] = None,
) -> DispatchResult:
    """Publish a plain-text message with Title/Priority headers."""
    headers = {
        "Title": title,
        "Priority": str(priority_to_ntfy(priority)),
        "Content-Type": "text/plain",
    }
    return await _post(config, client, content=message.encode("utf-8"), headers=headers)
