import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from flowscaffold.graph.flow_schema import Flow
from flowscaffold.mutation.tool_result import ToolResult
from flowscaffold.orchestrator.batch import (
    BatchOrchestrator,
    ORIGIN_AGENT,
    ORIGIN_DRAG,
    ORIGIN_SUBTREE,
    ORIGIN_UI,
)
from flowscaffold.visibility.group_visibility import visible_flow

from backend.app.api.schemas import (
    AddEdgeRequest,
    AddNodeRequest,
    CreateGroupRequest,
    ExpandGroupRequest,
    FlowPayload,
    HistoryStatusResponse,
    SubtreeCollapseRequest,
    ToolBatchRequest,
    UpdateEdgeRequest,
    UpdateNodeRequest,
)
from backend.app.dependencies import get_orchestrator

router = APIRouter()


def _guard(action: str, fn: Callable[[], Any]):
    try:
        return fn()
    except Exception:
        logging.getLogger("flowscaffold.api").exception("Error %s", action)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": f"Failed to {action}"},
        )


def _tool_response(result: ToolResult, **extra: Optional[str]):
    if not result.success:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": result.error},
        )

    body: Dict[str, Any] = {
        "success": True,
        "flow": visible_flow(result.updated_flow).to_dict(),
    }
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def _history_response(result: ToolResult, verb: str):
    if not result.success:
        return {"success": False, "message": result.error or f"Nothing to {verb}"}
    return {"success": True, "flow": visible_flow(result.updated_flow).to_dict()}


# -------------------- Flow --------------------


@router.get("/")
def read_flow(orchestrator: BatchOrchestrator = Depends(get_orchestrator)):
    return _guard(
        "load flow data",
        lambda: orchestrator.read_visible_flow().to_dict(),
    )


@router.post("/")
def save_flow(
    payload: FlowPayload,
    skip_snapshot: bool = Query(False, alias="skipSnapshot"),
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    def _save():
        orchestrator.save_flow(
            Flow.from_dict(payload.model_dump()),
            skip_snapshot=skip_snapshot,
        )
        return {"success": True}

    return _guard("save flow data", _save)


# -------------------- History --------------------


@router.post("/undo")
def undo(orchestrator: BatchOrchestrator = Depends(get_orchestrator)):
    return _guard("undo", lambda: _history_response(orchestrator.undo(), "undo"))


@router.post("/redo")
def redo(orchestrator: BatchOrchestrator = Depends(get_orchestrator)):
    return _guard("redo", lambda: _history_response(orchestrator.redo(), "redo"))


@router.get("/history-status", response_model=HistoryStatusResponse, response_model_by_alias=True)
def history_status(orchestrator: BatchOrchestrator = Depends(get_orchestrator)):
    return _guard("get history status", lambda: orchestrator.status().to_dict())


# -------------------- Nodes --------------------


@router.post("/node")
def create_node(
    request: AddNodeRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    def _create():
        result = orchestrator.run_tool("addNode", request.to_params())
        return _tool_response(result, nodeId=result.node_id)

    return _guard("create node", _create)


@router.put("/node/{node_id}")
def update_node(
    node_id: str,
    request: UpdateNodeRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    params = {"nodeId": node_id, **request.to_params()}
    only_moved = set(params) == {"nodeId", "position"}
    origin = ORIGIN_DRAG if only_moved else ORIGIN_UI

    return _guard(
        "update node",
        lambda: _tool_response(orchestrator.run_tool("updateNode", params, origin=origin)),
    )


@router.delete("/node/{node_id}")
def delete_node(
    node_id: str,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    return _guard(
        "delete node",
        lambda: _tool_response(orchestrator.run_tool("deleteNode", {"nodeId": node_id})),
    )


@router.put("/node/{node_id}/collapse")
def collapse_subtree(
    node_id: str,
    request: SubtreeCollapseRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    params = {"nodeId": node_id, "collapsed": request.collapsed}
    return _guard(
        "toggle subtree collapse",
        lambda: _tool_response(
            orchestrator.run_tool("toggleSubtreeCollapse", params, origin=ORIGIN_SUBTREE)
        ),
    )


# -------------------- Edges --------------------


@router.post("/edge")
def create_edge(
    request: AddEdgeRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    def _create():
        result = orchestrator.run_tool("addEdge", request.to_params())
        return _tool_response(result, edgeId=result.edge_id)

    return _guard("create edge", _create)


@router.put("/edge/{edge_id}")
def update_edge(
    edge_id: str,
    request: UpdateEdgeRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    params = {"edgeId": edge_id, **request.to_params()}
    return _guard(
        "update edge",
        lambda: _tool_response(orchestrator.run_tool("updateEdge", params)),
    )


@router.delete("/edge/{edge_id}")
def delete_edge(
    edge_id: str,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    return _guard(
        "delete edge",
        lambda: _tool_response(orchestrator.run_tool("deleteEdge", {"edgeId": edge_id})),
    )


# -------------------- Groups --------------------


@router.post("/group")
def create_group(
    request: CreateGroupRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    def _create():
        result = orchestrator.run_tool("createGroup", request.to_params())
        return _tool_response(result, groupId=result.group_id)

    return _guard("create group", _create)


@router.delete("/group/{group_id}")
def ungroup(
    group_id: str,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    return _guard(
        "ungroup",
        lambda: _tool_response(orchestrator.run_tool("ungroup", {"groupId": group_id})),
    )


@router.put("/group/{group_id}/expand")
def expand_group(
    group_id: str,
    request: ExpandGroupRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    params = {"groupId": group_id, "expand": request.expand}
    return _guard(
        "toggle group expansion",
        lambda: _tool_response(orchestrator.run_tool("toggleGroupExpansion", params)),
    )


# -------------------- Layout --------------------


@router.post("/auto-layout")
def auto_layout(orchestrator: BatchOrchestrator = Depends(get_orchestrator)):
    def _layout():
        result = orchestrator.run_tool("autoLayout")
        response = _tool_response(result)
        if isinstance(response, dict):
            response["tool"] = result.tool
            response["didChange"] = result.did_change
        return response

    return _guard("apply auto-layout", _layout)


# -------------------- Agent batches --------------------


@router.post("/tools")
def run_tools(
    request: ToolBatchRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    def _run():
        batch = orchestrator.run_batch(
            [call.model_dump() for call in request.tool_calls],
            origin=ORIGIN_AGENT,
        )
        body = batch.to_dict()
        body["updatedFlow"] = visible_flow(batch.flow).to_dict()
        return body

    return _guard("execute tool calls", _run)
