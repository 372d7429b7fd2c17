from __future__ import annotations

from typing import Any

from requests import Response

from .types import NotificationEvent


def flatten_event(event: NotificationEvent) -> dict[str, Any]:
    """Convert a NotificationEvent into a flat JSON-serialisable dictionary."""
    return {
        "message": event.message,
        "created": list(event.created),
        "failures": list(event.failures),
        "dry_run": event.dry_run,
        "event_type": event.event_type,
        "timestamp": event.timestamp.isoformat(),
    }


def _trim(value: str, limit: int) -> str:
    """Trim a string to a maximum length, appending '...' if truncated."""
    stripped = value.strip()
    if len(stripped) <= limit:
        return stripped
    if limit <= 3:
        return stripped[:limit]
    return stripped[: limit - 3] + "..."


def excerpt_response(response: Response) -> str:
    """Extract a short excerpt from an HTTP response for error messages."""
    return _trim(response.text or "<empty>", 200)
