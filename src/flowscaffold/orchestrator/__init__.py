"""
Batch orchestration for flowscaffold.

Ties the executor, persistence and history together so that one batch of
operations yields at most one write and one snapshot.
"""

from flowscaffold.orchestrator.batch import (
    ORIGIN_UI,
    ORIGIN_DRAG,
    ORIGIN_SUBTREE,
    ORIGIN_AGENT,
    ORIGIN_SAVE,
    ORIGIN_INIT,
    ToolCall,
    BatchResult,
    BatchOrchestrator,
)

__all__ = [
    "ORIGIN_UI",
    "ORIGIN_DRAG",
    "ORIGIN_SUBTREE",
    "ORIGIN_AGENT",
    "ORIGIN_SAVE",
    "ORIGIN_INIT",
    "ToolCall",
    "BatchResult",
    "BatchOrchestrator",
]
