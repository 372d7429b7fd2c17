"""Persistence layer for run-to-run bookkeeping.

Public API:
- HistoryLedger: append-only file of external ids that were already published
- LEDGER_BANNER: fixed first line written when a ledger is created

Example:
    from watchlink.persistence import HistoryLedger

    ledger = HistoryLedger(Path("/config/history.txt"))
    ledger.initialize()
    if "tt0111161" not in ledger.load_processed_ids():
        ...
"""

from .history_ledger import LEDGER_BANNER, HistoryLedger

__all__ = [
    "HistoryLedger",
    "LEDGER_BANNER",
]
