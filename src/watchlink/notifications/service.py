from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..config import NotificationSettings
from ..errors import NotificationError
from ..models import PublishResult
from .slack import SlackTarget
from .types import NotificationEvent, NotificationTarget
from .webhook import GenericWebhookTarget

LOGGER = logging.getLogger(__name__)

NOTHING_TO_PROCESS = "Watchlink complete, nothing to process"
SYMLINKS_CREATED = "Watchlink complete. Symlinks created:"


def build_summary_message(result: PublishResult, *, dry_run: bool = False) -> str:
    """Plain-text run summary used as the notification body.

    The created destinations are listed verbatim, one per line. An empty
    result with no failures yields the fixed "nothing to process" sentinel.
    """
    body = result.notification_body()
    if not body and not result.failures:
        message = NOTHING_TO_PROCESS
    elif body:
        message = f"{SYMLINKS_CREATED} \n{body}"
    else:
        message = "Watchlink complete, no symlinks created"

    if result.failures:
        lines = [f"{failure.destination or failure.match.external_id}: {failure.reason}" for failure in result.failures]
        message = message.rstrip("\n") + "\nFailures:\n" + "\n".join(lines) + "\n"

    if dry_run:
        message = f"[Dry-Run] {message}"
    return message


def build_event(result: PublishResult, *, dry_run: bool = False) -> NotificationEvent:
    return NotificationEvent(
        message=build_summary_message(result, dry_run=dry_run),
        created=list(result.created),
        failures=[failure.reason for failure in result.failures],
        dry_run=dry_run,
    )


class NotificationService:
    """Delivers the run summary to every enabled target.

    Delivery problems are logged and never raised: publication has already
    happened by the time a notification is sent.
    """

    def __init__(
        self,
        settings: NotificationSettings,
        *,
        enabled: bool = True,
        targets: Optional[Sequence[NotificationTarget]] = None,
        timeout: float = 10.0,
    ) -> None:
        self._enabled = enabled
        self._targets = list(targets) if targets is not None else self._build_targets(settings, timeout)

    @staticmethod
    def _build_targets(settings: NotificationSettings, timeout: float) -> list[NotificationTarget]:
        targets: list[NotificationTarget] = []
        if settings.slack_webhook_url:
            targets.append(SlackTarget(settings.slack_webhook_url, timeout=timeout))
        if settings.webhook_url:
            targets.append(GenericWebhookTarget(settings.webhook_url, timeout=timeout))
        return targets

    @property
    def enabled(self) -> bool:
        return self._enabled and any(target.enabled() for target in self._targets)

    @property
    def target_names(self) -> list[str]:
        return [target.name for target in self._targets if target.enabled()]

    def notify(self, event: NotificationEvent) -> bool:
        """Send ``event`` to all enabled targets; True if at least one succeeded."""
        if not self.enabled:
            LOGGER.debug("Notifications disabled; skipping run summary")
            return False

        successes: list[str] = []
        for target in self._targets:
            if not target.enabled():
                continue
            try:
                target.send(event)
            except NotificationError as exc:
                LOGGER.warning("Notification target %s failed: %s", target.name, exc)
            else:
                successes.append(target.name)

        if successes:
            LOGGER.info("Sent run summary notification via %s", ", ".join(successes))
        else:
            LOGGER.warning("Run summary notification failed for every target")
        return bool(successes)
