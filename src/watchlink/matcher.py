"""Join watchlist entries against library entries by external id.

Movies and shows are matched in two isolated passes. Within a pass every
watchlist entry is compared with every library entry. Duplicate ids on either
side are not collapsed: a watchlist id that appears twice in the library
produces two matches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Dict, List, Optional

from .errors import FetchError
from .logging_utils import render_fields_block
from .models import LibraryEntry, Match, MediaKind, WatchlistEntry
from .remap import destination_leaf_name

LOGGER = logging.getLogger(__name__)

WATCHLIST = "watchlist"
LIBRARY = "library"


def source_key(role: str, kind: MediaKind) -> str:
    """Key used for a fetched response body, e.g. ``watchlist:movie``."""
    return f"{role}:{kind.value}"


def _clean_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _expect_list(kind: MediaKind, role: str, payload: Any) -> list[Any]:
    if not isinstance(payload, list):
        raise FetchError(
            f"Expected a JSON array for {role} {kind.value} data, got {type(payload).__name__}",
            source=source_key(role, kind),
        )
    return payload


def parse_watchlist(kind: MediaKind, payload: Any) -> List[WatchlistEntry]:
    """Convert a Trakt watchlist response body into typed entries.

    Records that are not mappings are dropped; a missing ``ids.imdb`` value
    becomes ``None`` so the matcher can skip it.
    """
    entries: List[WatchlistEntry] = []
    for record in _expect_list(kind, WATCHLIST, payload):
        if not isinstance(record, dict):
            continue
        item = record.get(kind.value) or {}
        ids = item.get("ids") or {}
        entries.append(
            WatchlistEntry(
                kind=kind,
                external_id=_clean_id(ids.get("imdb")),
                title=str(item.get("title") or ""),
            )
        )
    return entries


def _parse_library_movie(record: dict[str, Any]) -> LibraryEntry:
    movie_file = record.get("movieFile") or {}
    return LibraryEntry(
        kind=MediaKind.MOVIE,
        external_id=_clean_id(record.get("imdbId")),
        has_local_file=record.get("hasFile") is True,
        source_path=str(record.get("folderName") or ""),
        file_relative_path=movie_file.get("relativePath"),
        title=str(record.get("title") or ""),
    )


def _parse_library_show(record: dict[str, Any]) -> LibraryEntry:
    statistics = record.get("statistics") or {}
    try:
        file_count = int(statistics.get("episodeFileCount") or 0)
    except (TypeError, ValueError):
        file_count = 0
    return LibraryEntry(
        kind=MediaKind.SHOW,
        external_id=_clean_id(record.get("imdbId")),
        has_local_file=file_count > 0,
        source_path=str(record.get("path") or ""),
        title=str(record.get("title") or ""),
    )


def parse_library(kind: MediaKind, payload: Any) -> List[LibraryEntry]:
    """Convert a Radarr movie list or Sonarr series list into typed entries."""
    parser = _parse_library_movie if kind is MediaKind.MOVIE else _parse_library_show
    return [parser(record) for record in _expect_list(kind, LIBRARY, payload) if isinstance(record, dict)]


def match_entries(
    watchlist: Sequence[WatchlistEntry],
    library: Sequence[LibraryEntry],
    processed_ids: Iterable[str],
) -> List[Match]:
    """Return matches for one media kind, in watchlist order then library order.

    A watchlist entry is skipped when its id is missing or already processed.
    Every library entry with the same id and a local file yields a match.
    """
    processed = processed_ids if isinstance(processed_ids, (set, frozenset)) else set(processed_ids)
    matches: List[Match] = []

    for wanted in watchlist:
        if wanted.external_id is None or wanted.external_id in processed:
            continue
        for available in library:
            if available.external_id != wanted.external_id or not available.has_local_file:
                continue
            matches.append(
                Match(
                    kind=available.kind,
                    external_id=wanted.external_id,
                    source_path=available.source_path,
                    destination_leaf_name=destination_leaf_name(available.source_path),
                    title=available.title if available.kind is MediaKind.SHOW else wanted.title,
                )
            )

    return matches


def match_responses(
    responses: Mapping[str, Any],
    processed_ids: Iterable[str],
) -> Dict[MediaKind, List[Match]]:
    """Run the per-kind matching passes over fetched response bodies.

    A kind is matched only when both its watchlist and library responses are
    present, which is the case exactly when its library service is enabled.
    """
    processed = set(processed_ids)
    results: Dict[MediaKind, List[Match]] = {}

    for kind in MediaKind:
        watchlist_key = source_key(WATCHLIST, kind)
        library_key = source_key(LIBRARY, kind)
        if watchlist_key not in responses or library_key not in responses:
            continue

        watchlist = parse_watchlist(kind, responses[watchlist_key])
        library = parse_library(kind, responses[library_key])
        matches = match_entries(watchlist, library, processed)
        results[kind] = matches

        LOGGER.info(
            render_fields_block(
                f"Matched {kind.label}",
                {
                    "Watchlist": len(watchlist),
                    "Library": len(library),
                    "Already Processed": sum(1 for entry in watchlist if entry.external_id in processed),
                    "New Matches": len(matches),
                },
            )
        )
        for match in matches:
            LOGGER.debug("Match %s | %s -> %s", match.external_id, match.title or "(untitled)", match.source_path)

    return results
