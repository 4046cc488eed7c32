from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from flowscaffold.graph.flow_schema import Flow


class FlowValidationError(ValueError):
    """
    An operation was asked to do something the document does not allow:
    unknown ids, duplicate ids, bad parameter types, group cycles.
    """


@dataclass(frozen=True)
class ToolResult:
    """
    Uniform outcome of one named operation.

    restored marks a flow that came out of the history log (undo/redo),
    which must be persisted without recording a new snapshot.
    """

    success: bool
    tool: Optional[str] = None
    updated_flow: Optional[Flow] = None
    error: Optional[str] = None

    node_id: Optional[str] = None
    edge_id: Optional[str] = None
    group_id: Optional[str] = None

    did_change: Optional[bool] = None
    restored: bool = False

    @staticmethod
    def ok(flow: Flow, **extra: Any) -> "ToolResult":
        return ToolResult(success=True, updated_flow=flow, **extra)

    @staticmethod
    def failure(error: str, tool: Optional[str] = None) -> "ToolResult":
        return ToolResult(success=False, tool=tool, error=error)

    def with_tool(self, tool: str) -> "ToolResult":
        return self if self.tool else replace(self, tool=tool)

    def to_dict(self, include_flow: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        optional = {
            "tool": self.tool,
            "error": self.error,
            "nodeId": self.node_id,
            "edgeId": self.edge_id,
            "groupId": self.group_id,
            "didChange": self.did_change,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if include_flow and self.updated_flow is not None:
            data["updatedFlow"] = self.updated_flow.to_dict()
        return data
