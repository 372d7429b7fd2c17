from __future__ import annotations

import logging

import requests
from requests.exceptions import RequestException

from ..errors import NotificationError
from .types import NotificationEvent, NotificationTarget
from .utils import excerpt_response

LOGGER = logging.getLogger(__name__)


class SlackTarget(NotificationTarget):
    """Slack incoming-webhook target posting the plain-text run summary."""

    name = "slack"

    def __init__(self, webhook_url: str | None, *, timeout: float = 10.0) -> None:
        self.webhook_url = webhook_url.strip() if isinstance(webhook_url, str) else None
        self.timeout = timeout

    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def send(self, event: NotificationEvent) -> None:
        if not self.enabled():
            return
        try:
            response = requests.post(self.webhook_url, json={"text": event.message}, timeout=self.timeout)
        except RequestException as exc:
            raise NotificationError(f"Failed to send Slack notification: {exc}") from exc

        if response.status_code >= 400:
            raise NotificationError(
                f"Slack webhook responded with {response.status_code}: {excerpt_response(response)}"
            )
        LOGGER.debug("Slack webhook accepted run summary (%s)", response.status_code)
