"""
History subsystem for flowscaffold.

Implements the undo/redo snapshot log kept for each flow.
"""

from flowscaffold.history.history_store import (
    Snapshot,
    HistoryStatus,
    HistoryStore,
    HistoryRegistry,
)

__all__ = [
    "Snapshot",
    "HistoryStatus",
    "HistoryStore",
    "HistoryRegistry",
]
