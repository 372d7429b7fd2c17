"""Publish matches into the output directory as directory symlinks.

Each match is handled on its own: a failure is recorded and the next match is
still attempted. The ledger is appended only after the symlink exists, so the
ledger holds exactly the ids whose publication succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from .config import PathMapping
from .errors import LedgerIOError, PathRemapError, PublishError
from .logging_utils import render_fields_block
from .models import Match, MediaKind, PublishFailure, PublishResult
from .persistence import HistoryLedger
from .remap import remap_path
from .utils import symlink_directory

LOGGER = logging.getLogger(__name__)


class Publisher:
    def __init__(
        self,
        ledger: HistoryLedger,
        output_dir: Path,
        path_mappings: Mapping[MediaKind, PathMapping],
        *,
        strict_path_mapping: bool = True,
        dry_run: bool = False,
    ) -> None:
        self.ledger = ledger
        self.output_dir = output_dir
        self.path_mappings = dict(path_mappings)
        self.strict_path_mapping = strict_path_mapping
        self.dry_run = dry_run

    def destination_for(self, match: Match) -> Path:
        return self.output_dir / match.destination_leaf_name

    def resolve_source(self, match: Match) -> Path:
        """Host-side path of the matched library folder.

        Raises:
            PathRemapError: If no mapping is configured for the match's kind, or
                strict mapping is on and the prefix does not match
        """
        mapping = self.path_mappings.get(match.kind)
        if mapping is None:
            raise PathRemapError(f"No path mapping configured for {match.kind.value} matches")
        return Path(
            remap_path(
                match.source_path,
                mapping.container_path,
                mapping.host_path,
                strict=self.strict_path_mapping,
            )
        )

    @staticmethod
    def link(source: Path, destination: Path) -> None:
        """Create the directory symlink, raising ``PublishError`` if it was not created."""
        outcome = symlink_directory(source, destination)
        if not outcome.created:
            raise PublishError(outcome.reason or f"symlink creation failed for {destination}")

    def publish(self, matches: Sequence[Match]) -> PublishResult:
        result = PublishResult()
        for match in matches:
            self._publish_one(match, result)
        return result

    def _publish_one(self, match: Match, result: PublishResult) -> None:
        if not match.destination_leaf_name:
            result.record_failure(
                PublishFailure(match=match, reason=f"empty source path for {match.external_id}", stage="remap")
            )
            return

        destination = self.destination_for(match)

        try:
            source = self.resolve_source(match)
        except PathRemapError as exc:
            self._fail(result, match, str(exc), "remap", destination)
            return

        if self.dry_run:
            LOGGER.info(
                render_fields_block(
                    "Dry-Run: Would Create Symlink",
                    {"Id": match.external_id, "Destination": destination, "Target": source},
                )
            )
            result.record_created(str(destination))
            return

        try:
            self.link(source, destination)
        except PublishError as exc:
            self._fail(result, match, str(exc), "symlink", destination)
            return

        LOGGER.info(
            render_fields_block(
                "Symlink Created",
                {"Id": match.external_id, "Title": match.title, "Destination": destination, "Target": source},
            )
        )

        try:
            self.ledger.append(match.external_id)
        except LedgerIOError as exc:
            self._fail(result, match, str(exc), "ledger", destination)
            return

        result.record_created(str(destination))

    @staticmethod
    def _fail(result: PublishResult, match: Match, reason: str, stage: str, destination: Path) -> None:
        LOGGER.error(
            render_fields_block(
                "Publication Failed",
                {"Id": match.external_id, "Stage": stage, "Destination": destination, "Reason": reason},
            )
        )
        result.record_failure(PublishFailure(match=match, reason=reason, stage=stage, destination=str(destination)))
