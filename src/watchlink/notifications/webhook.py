from __future__ import annotations

import logging
from typing import Any

import requests
from requests.exceptions import RequestException

from ..errors import NotificationError
from .types import NotificationEvent, NotificationTarget
from .utils import excerpt_response, flatten_event

LOGGER = logging.getLogger(__name__)


class GenericWebhookTarget(NotificationTarget):
    """Generic JSON webhook target with configurable method and headers."""

    name = "webhook"

    def __init__(
        self,
        url: str | None,
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = url.strip() if isinstance(url, str) else None
        self.method = method.upper()
        self.headers = {str(k): str(v) for k, v in (headers or {}).items()}
        self.timeout = timeout

    def enabled(self) -> bool:
        return bool(self.url)

    def send(self, event: NotificationEvent) -> None:
        if not self.enabled():
            return
        payload: dict[str, Any] = flatten_event(event)
        try:
            response = requests.request(
                self.method,
                self.url,
                json=payload,
                headers=self.headers or None,
                timeout=self.timeout,
            )
        except RequestException as exc:
            raise NotificationError(f"Failed to send webhook notification: {exc}") from exc

        if response.status_code >= 400:
            raise NotificationError(f"Webhook responded with {response.status_code}: {excerpt_response(response)}")
        LOGGER.debug("Webhook %s %s accepted run summary (%s)", self.method, self.url, response.status_code)
