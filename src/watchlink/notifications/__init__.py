"""
Run summary notifications for watchlink.

Public API:
    - NotificationEvent: Dataclass carrying the run summary message
    - NotificationTarget: Base class for notification targets
    - NotificationService: Delivers an event to every enabled target
    - SlackTarget: Slack incoming-webhook target
    - GenericWebhookTarget: Generic JSON webhook target
    - build_summary_message / build_event: Render a PublishResult for delivery
"""

from __future__ import annotations

from .types import NotificationEvent, NotificationTarget

from .slack import SlackTarget
from .webhook import GenericWebhookTarget

from .service import (
    NOTHING_TO_PROCESS,
    SYMLINKS_CREATED,
    NotificationService,
    build_event,
    build_summary_message,
)

__all__ = [
    "NotificationEvent",
    "NotificationTarget",
    "SlackTarget",
    "GenericWebhookTarget",
    "NotificationService",
    "NOTHING_TO_PROCESS",
    "SYMLINKS_CREATED",
    "build_event",
    "build_summary_message",
]
