from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PositionModel(BaseModel):
    x: float
    y: float


class FlowPayload(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]


class AddNodeRequest(CamelModel):
    id: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    parent_node_id: Optional[str] = None
    edge_label: Optional[str] = None


class UpdateNodeRequest(CamelModel):
    label: Optional[str] = None
    description: Optional[str] = None
    position: Optional[PositionModel] = None


class SubtreeCollapseRequest(CamelModel):
    # Left untyped so a non-boolean reaches the executor's own check.
    collapsed: Any = None


class AddEdgeRequest(CamelModel):
    source_node_id: Optional[str] = None
    target_node_id: Optional[str] = None
    label: Optional[str] = None


class UpdateEdgeRequest(CamelModel):
    label: Optional[str] = None


class CreateGroupRequest(CamelModel):
    member_ids: Any = None
    label: Optional[str] = None
    position: Optional[PositionModel] = None


class ExpandGroupRequest(CamelModel):
    expand: Any = None


class ToolCallModel(BaseModel):
    name: str
    params: Dict[str, Any] = {}


class ToolBatchRequest(CamelModel):
    tool_calls: List[ToolCallModel]


class HistoryStatusResponse(CamelModel):
    can_undo: bool
    can_redo: bool
    snapshot_count: int
    current_sequence: Optional[int] = None
    current_timestamp: Optional[str] = None
    current_index: int
