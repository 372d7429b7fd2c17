from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class MediaKind(str, Enum):
    MOVIE = "movie"
    SHOW = "show"

    @property
    def label(self) -> str:
        return "Movies" if self is MediaKind.MOVIE else "Shows"


@dataclass(frozen=True, slots=True)
class WatchlistEntry:
    kind: MediaKind
    external_id: Optional[str]
    title: str = ""


@dataclass(frozen=True, slots=True)
class LibraryEntry:
    kind: MediaKind
    external_id: Optional[str]
    has_local_file: bool
    source_path: str
    file_relative_path: Optional[str] = None
    title: str = ""


@dataclass(frozen=True, slots=True)
class Match:
    kind: MediaKind
    external_id: str
    source_path: str
    destination_leaf_name: str
    title: str = ""


@dataclass(slots=True)
class PublishFailure:
    """A match that could not be published.

    Attributes:
        match: The match that failed
        reason: Human readable failure description
        stage: Which step failed: "remap", "symlink" or "ledger"
        destination: Destination path that was attempted
    """

    match: Match
    reason: str
    stage: str
    destination: str = ""


@dataclass(slots=True)
class PublishResult:
    created: List[str] = field(default_factory=list)
    failures: List[PublishFailure] = field(default_factory=list)

    @property
    def first_failure(self) -> Optional[PublishFailure]:
        return self.failures[0] if self.failures else None

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def record_created(self, destination: str) -> None:
        self.created.append(destination)

    def record_failure(self, failure: PublishFailure) -> None:
        self.failures.append(failure)

    def merge(self, other: "PublishResult") -> "PublishResult":
        return PublishResult(
            created=[*self.created, *other.created],
            failures=[*self.failures, *other.failures],
        )

    def notification_body(self) -> str:
        """Newline-joined created destinations; empty when nothing was created."""
        return "".join(f"{destination}\n" for destination in self.created)


@dataclass(slots=True)
class RunReport:
    matches_by_kind: Dict[MediaKind, int] = field(default_factory=dict)
    result: PublishResult = field(default_factory=PublishResult)
    message: str = ""
    notified: bool = False
    dry_run: bool = False
    started_at: dt.datetime = field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))
    elapsed_seconds: float = 0.0

    @property
    def total_matches(self) -> int:
        return sum(self.matches_by_kind.values())
