"""
flowscaffold
============

Flow graph mutation, grouping/visibility and undo/redo engine for a
node-and-edge diagram edited by people and by language-model agents.

Core idea:
- Every edit is a named operation on an immutable document.
- One batch of operations yields at most one write and one snapshot.

Public API:
- Flow, Node, Edge
- MutationExecutor
- HistoryStore
- BatchOrchestrator
- apply_group_visibility
"""

from flowscaffold.graph.flow_schema import Flow, Node, Edge, Position
from flowscaffold.mutation.executor import MutationExecutor
from flowscaffold.history.history_store import HistoryStore
from flowscaffold.orchestrator.batch import BatchOrchestrator, ToolCall
from flowscaffold.visibility.group_visibility import apply_group_visibility

__all__ = [
    "Flow",
    "Node",
    "Edge",
    "Position",
    "MutationExecutor",
    "HistoryStore",
    "BatchOrchestrator",
    "ToolCall",
    "apply_group_visibility",
]

__version__ = "0.1.0"
