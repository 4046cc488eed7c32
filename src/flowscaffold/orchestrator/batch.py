from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from flowscaffold.config.settings import FlowScaffoldConfig
from flowscaffold.graph.flow_schema import Flow
from flowscaffold.history.history_store import HistoryRegistry, HistoryStatus, HistoryStore
from flowscaffold.mutation.executor import MutationExecutor
from flowscaffold.mutation.tool_result import ToolResult
from flowscaffold.storage.flow_repository import FlowRepository
from flowscaffold.visibility.group_visibility import visible_flow


# Origin tags recorded on history snapshots
ORIGIN_UI = "ui.action"
ORIGIN_DRAG = "ui.drag"
ORIGIN_SUBTREE = "ui.subtree"
ORIGIN_AGENT = "llm.tool"
ORIGIN_SAVE = "api.save"
ORIGIN_INIT = "init"


@dataclass(frozen=True)
class ToolCall:
    name: str
    params: Mapping[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ToolCall":
        return ToolCall(name=str(data.get("name", "")), params=dict(data.get("params") or {}))


@dataclass(frozen=True)
class BatchResult:
    """
    Outcome of one batch: per-operation results plus what was committed.
    """

    results: Tuple[ToolResult, ...]
    flow: Flow
    committed: bool = False
    snapshot_pushed: bool = False
    error: Optional[str] = None

    @property
    def failures(self) -> List[ToolResult]:
        return [r for r in self.results if not r.success]

    @property
    def all_succeeded(self) -> bool:
        return self.error is None and not self.failures

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.all_succeeded,
            "execution": [r.to_dict(include_flow=False) for r in self.results],
            "committed": self.committed,
            "snapshotPushed": self.snapshot_pushed,
            "updatedFlow": self.flow.to_dict(),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


class BatchOrchestrator:
    """
    Runs operations as one logical unit against a flow identity.

    The flow is read once at the start of a batch. Operations run in order
    and the working flow only advances on success; a failed operation does
    not stop the ones after it. If the flow changed, it is written once and
    exactly one snapshot is pushed. A batch whose net effect is an
    undo/redo restore is written without a snapshot.

    If the write fails, the history cursor is put back where the batch
    found it. History is seeded by initialize_history, not by batches.
    """

    def __init__(
        self,
        *,
        repository: FlowRepository,
        executor: MutationExecutor | None = None,
        histories: HistoryRegistry | None = None,
        config: FlowScaffoldConfig | None = None,
    ) -> None:
        self.config = config or FlowScaffoldConfig()
        self.repository = repository
        self.executor = executor or MutationExecutor(layout_config=self.config.layout)
        self.histories = histories or HistoryRegistry(self.config.history)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _flow_id(self, flow_id: Optional[str]) -> str:
        return flow_id or self.config.default_flow_id

    def history(self, flow_id: Optional[str] = None) -> HistoryStore:
        return self.histories.get(self._flow_id(flow_id))

    def read_flow(self, flow_id: Optional[str] = None) -> Flow:
        return self.repository.read(self._flow_id(flow_id))

    def read_visible_flow(self, flow_id: Optional[str] = None) -> Flow:
        """
        Stored flow with group visibility applied, ready for rendering.
        """
        return visible_flow(self.read_flow(flow_id))

    def status(self, flow_id: Optional[str] = None) -> HistoryStatus:
        return self.history(flow_id).status()

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def run_batch(
        self,
        tool_calls: Iterable[Union[ToolCall, Mapping[str, Any]]],
        *,
        origin: str = ORIGIN_AGENT,
        flow_id: Optional[str] = None,
    ) -> BatchResult:
        flow_id = self._flow_id(flow_id)
        calls = [c if isinstance(c, ToolCall) else ToolCall.from_dict(c) for c in tool_calls]
        logger = logging.getLogger("flowscaffold.batch")
        history = self.histories.get(flow_id)

        try:
            start = self.repository.read(flow_id)
        except Exception as exc:
            logger.exception("failed to read flow %s", flow_id)
            message = str(exc) or exc.__class__.__name__
            return BatchResult(
                results=tuple(ToolResult.failure(message, tool=c.name) for c in calls),
                flow=Flow.empty(),
                error=message,
            )

        working = start
        cursor = history.cursor
        restored_last = False
        results: List[ToolResult] = []

        for call in calls:
            result = self.executor.execute(call.name, call.params, working, history=history)
            results.append(result)

            if result.success and result.updated_flow is not None:
                if result.restored:
                    restored_last = True
                elif result.updated_flow != working:
                    restored_last = False
                working = result.updated_flow

        committed = False
        snapshot_pushed = False
        error = None

        if working != start:
            try:
                self.repository.write(flow_id, working)
                committed = True
                if not restored_last:
                    snapshot_pushed = history.push(working, origin=origin)
            except Exception as exc:
                logger.exception("failed to commit flow %s", flow_id)
                history.seek(cursor)
                error = str(exc) or exc.__class__.__name__

        logger.info(
            "batch flow=%s origin=%s ops=%d failed=%d committed=%s snapshot=%s",
            flow_id,
            origin,
            len(results),
            sum(1 for r in results if not r.success),
            committed,
            snapshot_pushed,
        )

        return BatchResult(
            results=tuple(results),
            flow=working if error is None else start,
            committed=committed,
            snapshot_pushed=snapshot_pushed,
            error=error,
        )

    def run_tool(
        self,
        name: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        origin: str = ORIGIN_UI,
        flow_id: Optional[str] = None,
    ) -> ToolResult:
        """
        Single-operation batch, returning the operation's own result.
        """
        batch = self.run_batch([ToolCall(name, dict(params or {}))], origin=origin, flow_id=flow_id)
        result = batch.results[0]
        if batch.error is not None and result.success:
            return ToolResult.failure(batch.error, tool=name)
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self, flow_id: Optional[str] = None) -> ToolResult:
        return self.run_tool("undo", origin=ORIGIN_UI, flow_id=flow_id)

    def redo(self, flow_id: Optional[str] = None) -> ToolResult:
        return self.run_tool("redo", origin=ORIGIN_UI, flow_id=flow_id)

    def save_flow(
        self,
        flow: Flow,
        *,
        skip_snapshot: bool = False,
        origin: str = ORIGIN_SAVE,
        flow_id: Optional[str] = None,
    ) -> bool:
        """
        Replace the whole stored flow. Returns True if a snapshot was pushed.

        Synthetic group edges in a rendered flow are not stored.
        """
        flow_id = self._flow_id(flow_id)
        flow = flow.without_synthetic()
        self.repository.write(flow_id, flow)
        if skip_snapshot:
            return False
        return self.histories.get(flow_id).push(flow, origin=origin)

    def initialize_history(self, flow_id: Optional[str] = None) -> HistoryStatus:
        """
        Reset the history of a flow and seed it with the stored flow.
        """
        history = self.history(flow_id)
        history.initialize(self.read_flow(flow_id), origin=ORIGIN_INIT)
        return history.status()
