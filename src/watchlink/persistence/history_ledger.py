"""Append-only ledger of published external ids.

The ledger is a plain UTF-8 text file: a fixed banner on the first line, then
one external id per line, each terminated by a newline. Ids are only ever
appended, so the set of processed ids grows monotonically across runs.

An id is appended only after its symlink has been created. A crash between
the two steps leaves the symlink unrecorded; the next run retries the match
and reports the existing destination instead of losing the item silently.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..errors import LedgerIOError

LOGGER = logging.getLogger(__name__)

LEDGER_BANNER = "These items have already been processed and will be ignored"


class HistoryLedger:
    """Newline-delimited record of processed external ids.

    The ledger takes no locks. Only one run may use a ledger file at a time.

    Example:
        ledger = HistoryLedger(Path("/config/history.txt"))
        ledger.initialize()
        processed = ledger.load_processed_ids()
        ledger.append("tt0111161")
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def initialize(self) -> bool:
        """Create the ledger with its banner line if it is missing.

        Returns:
            True if the file was created, False if it already existed

        Raises:
            LedgerIOError: If the file cannot be written
        """
        if self.exists():
            return False
        try:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(LEDGER_BANNER + "\n")
        except OSError as exc:
            raise LedgerIOError(f"Unable to create history ledger {self.path}: {exc}") from exc
        LOGGER.info("Created history ledger at %s", self.path)
        return True

    def ids(self) -> list[str]:
        """Return recorded ids in file order, banner and blank lines removed."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise LedgerIOError(f"Unable to read history ledger {self.path}: {exc}") from exc

        lines = text.split("\n")
        # First line is the banner; the final newline leaves an empty tail element.
        body = lines[1:]
        if body and body[-1] == "":
            body = body[:-1]
        return [line.strip() for line in body if line.strip()]

    def load_processed_ids(self) -> set[str]:
        return set(self.ids())

    def append(self, external_id: str) -> None:
        """Record ``external_id`` as published.

        Raises:
            LedgerIOError: If the line cannot be written
        """
        try:
            prefix = "\n" if self._missing_final_newline() else ""
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(prefix + external_id + "\n")
        except OSError as exc:
            raise LedgerIOError(f"Unable to append {external_id} to history ledger {self.path}: {exc}") from exc
        LOGGER.debug("Recorded %s in history ledger", external_id)

    def _missing_final_newline(self) -> bool:
        # Hand-edited ledgers may lack the final newline
        if not self.exists():
            return False
        with self.path.open("rb") as handle:
            handle.seek(0, os.SEEK_END)
            if handle.tell() == 0:
                return False
            handle.seek(-1, os.SEEK_END)
            return handle.read(1) != b"\n"

    def __contains__(self, external_id: object) -> bool:
        return isinstance(external_id, str) and external_id in self.load_processed_ids()

    def __repr__(self) -> str:
        return f"HistoryLedger({str(self.path)!r})"
