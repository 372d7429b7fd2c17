from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List


@dataclass
class NotificationEvent:
    message: str
    created: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    dry_run: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> str:
        if self.failures:
            return "error"
        if self.created:
            return "new"
        return "empty"


class NotificationTarget:
    name: str = "target"

    def enabled(self) -> bool:
        return True

    def send(self, event: NotificationEvent) -> None:
        raise NotImplementedError
