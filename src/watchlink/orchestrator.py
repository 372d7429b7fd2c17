"""Run sequencing: fetch, match, publish, notify.

Each stage either returns its result or raises a ``WatchlinkError`` subclass.
Fetch and ledger errors abort the run before anything is published;
publication failures are isolated per match; notification failures are only
logged.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Mapping, Optional

from .arr_client import ArrClient
from .config import AppConfig
from .errors import FetchError, WatchlinkError
from .logging_utils import render_fields_block, render_section_block
from .matcher import LIBRARY, WATCHLIST, match_responses, source_key
from .models import Match, MediaKind, PublishResult, RunReport
from .notifications import NotificationService, build_event
from .persistence import HistoryLedger
from .publisher import Publisher
from .trakt_client import TraktClient

LOGGER = logging.getLogger(__name__)


class Orchestrator:
    def __init__(
        self,
        config: AppConfig,
        *,
        trakt_client: Optional[TraktClient] = None,
        library_clients: Optional[Mapping[MediaKind, ArrClient]] = None,
        notification_service: Optional[NotificationService] = None,
    ) -> None:
        self.config = config
        self.ledger = HistoryLedger(config.history_path)
        self.trakt_client = trakt_client or TraktClient(
            config.trakt.user_id,
            config.trakt.client_id,
            timeout=config.request_timeout,
        )
        if library_clients is None:
            library_clients = {
                library.kind: ArrClient.from_settings(library, timeout=config.request_timeout)
                for library in config.libraries
            }
        self.library_clients: Dict[MediaKind, ArrClient] = dict(library_clients)
        self.notification_service = notification_service or NotificationService(config.notifications)
        if self.notification_service.enabled:
            LOGGER.debug("Notification targets: %s", ", ".join(self.notification_service.target_names))
        self.publisher = Publisher(
            self.ledger,
            config.output_dir,
            config.path_mappings(),
            strict_path_mapping=config.strict_path_mapping,
            dry_run=config.dry_run,
        )

    def _fetch_jobs(self) -> Dict[str, Callable[[], Any]]:
        jobs: Dict[str, Callable[[], Any]] = {}
        for kind in self.config.enabled_kinds:
            client = self.library_clients.get(kind)
            if client is None:
                continue
            jobs[source_key(WATCHLIST, kind)] = lambda kind=kind: self.trakt_client.get_watchlist(kind)
            jobs[source_key(LIBRARY, kind)] = client.get_library
        return jobs

    def fetch_all(self) -> Dict[str, Any]:
        """Fetch every upstream response concurrently.

        All requests must succeed; the first failure cancels the requests that
        have not started yet and is raised as ``FetchError``.
        """
        jobs = self._fetch_jobs()
        if not jobs:
            return {}

        LOGGER.info("Fetching %d upstream lists", len(jobs))
        responses: Dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="watchlink-fetch") as executor:
            future_map: Dict[Future, str] = {executor.submit(job): key for key, job in jobs.items()}
            done, pending = wait(future_map, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()

            for future in future_map:
                if future not in done:
                    continue
                exc = future.exception()
                if exc is None:
                    responses[future_map[future]] = future.result()
                    continue
                if isinstance(exc, FetchError):
                    raise exc
                raise FetchError(f"Fetching {future_map[future]} failed: {exc}", source=future_map[future]) from exc

        return responses

    def publish_all(self, matches_by_kind: Mapping[MediaKind, List[Match]]) -> PublishResult:
        merged = PublishResult()
        for matches in matches_by_kind.values():
            if not matches:
                continue
            merged = merged.merge(self.publisher.publish(matches))
        return merged

    def run(self) -> RunReport:
        """Execute one reconciliation run.

        Raises:
            LedgerIOError: If the ledger cannot be created or read
            FetchError: If any upstream request fails
        """
        report = RunReport(dry_run=self.config.dry_run)
        started = time.perf_counter()
        outcome = "failed"

        try:
            processed_ids: set[str] = self.ledger.load_processed_ids() if self.ledger.exists() else set()
            LOGGER.debug("Loaded %d processed ids from %s", len(processed_ids), self.ledger.path)

            responses = self.fetch_all()
            # Created only once every fetch succeeded; dry runs never create it
            if not self.config.dry_run:
                self.ledger.initialize()
            matches_by_kind = match_responses(responses, processed_ids)
            report.matches_by_kind = {kind: len(matches) for kind, matches in matches_by_kind.items()}

            report.result = self.publish_all(matches_by_kind)
            event = build_event(report.result, dry_run=self.config.dry_run)
            report.message = event.message
            report.notified = self.notification_service.notify(event)
            outcome = "completed with failures" if report.result.has_failures else "completed"
            return report
        except WatchlinkError as exc:
            LOGGER.error(render_fields_block("Run Aborted", {"Error": type(exc).__name__, "Reason": exc}))
            raise
        finally:
            report.elapsed_seconds = time.perf_counter() - started
            self._log_recap(report, outcome)

    def _log_recap(self, report: RunReport, outcome: str) -> None:
        LOGGER.info(
            render_section_block(
                "Processing Completed",
                [
                    ("Created", report.result.created),
                    ("Failures", [f"{f.destination or f.match.external_id}: {f.reason}" for f in report.result.failures]),
                ],
                fields={
                    "Outcome": outcome,
                    "Started": report.started_at.isoformat(timespec="seconds"),
                    "Movies Matched": report.matches_by_kind.get(MediaKind.MOVIE, 0),
                    "Shows Matched": report.matches_by_kind.get(MediaKind.SHOW, 0),
                    "Dry Run": report.dry_run,
                    "Duration": f"{report.elapsed_seconds:.2f}s",
                },
            )
        )

    def close(self) -> None:
        self.trakt_client.close()
        for client in self.library_clients.values():
            client.close()
