from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from flowscaffold.config.settings import HistoryConfig
from flowscaffold.graph.flow_schema import Flow
from flowscaffold.utils.time import utc_now


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable recorded flow state.

    sequence is the total order. created_at is informational only, two
    snapshots may share a timestamp.
    """

    sequence: int
    created_at: datetime
    flow: Flow
    fingerprint: str
    origin: Optional[str] = None


@dataclass(frozen=True)
class HistoryStatus:
    can_undo: bool
    can_redo: bool
    snapshot_count: int
    current_sequence: Optional[int]
    current_timestamp: Optional[datetime]
    current_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "canUndo": self.can_undo,
            "canRedo": self.can_redo,
            "snapshotCount": self.snapshot_count,
            "currentSequence": self.current_sequence,
            "currentTimestamp": (
                self.current_timestamp.isoformat() if self.current_timestamp else None
            ),
            "currentIndex": self.current_index,
        }


class HistoryStore:
    """
    Capped snapshot log with a single undo/redo cursor.

    - push deduplicates against the snapshot under the cursor
    - push after undo discards everything newer than the cursor
    - the oldest snapshots are evicted beyond max_snapshots
    """

    def __init__(self, config: HistoryConfig | None = None) -> None:
        self.config = config or HistoryConfig()
        self._snapshots: List[Snapshot] = []
        self._cursor: Optional[int] = None
        self._next_sequence = 1

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def push(self, flow: Flow, origin: Optional[str] = None) -> bool:
        """
        Record flow as the newest state. Returns False when deduplicated.
        """
        digest = flow.fingerprint()

        current = self.current()
        if current is not None and current.fingerprint == digest:
            return False

        if self._cursor is not None:
            self._snapshots = [s for s in self._snapshots if s.sequence <= self._cursor]

        snapshot = Snapshot(
            sequence=self._next_sequence,
            created_at=utc_now(),
            flow=flow,
            fingerprint=digest,
            origin=origin,
        )
        self._next_sequence += 1
        self._snapshots.append(snapshot)
        self._cursor = snapshot.sequence

        overflow = len(self._snapshots) - self.config.max_snapshots
        if overflow > 0:
            self._snapshots = self._snapshots[overflow:]
            logging.getLogger("flowscaffold.history").debug(
                "evicted %d snapshot(s), oldest kept sequence=%d",
                overflow,
                self._snapshots[0].sequence,
            )

        return True

    def undo(self) -> Optional[Flow]:
        index = self._cursor_index()
        if index is None or index == 0:
            return None
        target = self._snapshots[index - 1]
        self._cursor = target.sequence
        return target.flow

    def redo(self) -> Optional[Flow]:
        index = self._cursor_index()
        if index is None or index >= len(self._snapshots) - 1:
            return None
        target = self._snapshots[index + 1]
        self._cursor = target.sequence
        return target.flow

    def status(self) -> HistoryStatus:
        index = self._cursor_index()
        current = self.current()
        return HistoryStatus(
            can_undo=index is not None and index > 0,
            can_redo=index is not None and index < len(self._snapshots) - 1,
            snapshot_count=len(self._snapshots),
            current_sequence=self._cursor,
            current_timestamp=current.created_at if current else None,
            current_index=index + 1 if index is not None else -1,
        )

    def clear(self) -> None:
        self._snapshots = []
        self._cursor = None

    def initialize(self, flow: Flow, origin: Optional[str] = None) -> None:
        self.clear()
        self.push(flow, origin=origin)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def current(self) -> Optional[Snapshot]:
        index = self._cursor_index()
        return self._snapshots[index] if index is not None else None

    def snapshots(self) -> Tuple[Snapshot, ...]:
        return tuple(self._snapshots)

    @property
    def cursor(self) -> Optional[int]:
        return self._cursor

    def seek(self, sequence: Optional[int]) -> None:
        """
        Put the cursor back on a sequence read earlier from `cursor`.

        Unknown sequences (evicted since) are ignored.
        """
        if sequence is None or any(s.sequence == sequence for s in self._snapshots):
            self._cursor = sequence

    def _cursor_index(self) -> Optional[int]:
        if self._cursor is None:
            return None
        for i, snapshot in enumerate(self._snapshots):
            if snapshot.sequence == self._cursor:
                return i
        return None


class HistoryRegistry:
    """
    One HistoryStore per flow identity.
    """

    def __init__(self, config: HistoryConfig | None = None) -> None:
        self.config = config or HistoryConfig()
        self._stores: Dict[str, HistoryStore] = {}

    def get(self, flow_id: str) -> HistoryStore:
        store = self._stores.get(flow_id)
        if store is None:
            store = HistoryStore(self.config)
            self._stores[flow_id] = store
        return store
