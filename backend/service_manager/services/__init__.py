"""Outbound integrations."""
from .ntfy_client import (
    RelayConfig,
    NtfyPayload,
    DispatchResult,
    build_payload,
    priority_to_ntfy,
    publish_json,
    publish_text,
)

__all__ = [
    "RelayConfig",
    "NtfyPayload",
    "DispatchResult",
    "build_payload",
    "priority_to_ntfy",
    "publish_json",
    "publish_text",
]
