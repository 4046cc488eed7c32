from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from flowscaffold.config.settings import LayoutConfig
from flowscaffold.graph.flow_schema import Edge, Flow, Node, Position
from flowscaffold.history.history_store import HistoryStore
from flowscaffold.layout.layered_layout import (
    LayoutSpacing,
    NodeDimensions,
    apply_layered_layout,
)
from flowscaffold.mutation.tool_result import FlowValidationError, ToolResult
from flowscaffold.utils.helpers import group_anchor, points_close
from flowscaffold.utils.text import sanitize_id
from flowscaffold.utils.time import generate_id
from flowscaffold.visibility.group_visibility import apply_group_visibility
from flowscaffold.visibility.subtree import collapse_subtree_by_handles
from flowscaffold.visibility.validation import validate_group_membership


LayoutFn = Callable[[List[Node], List[Edge]], Tuple[List[Node], List[Edge]]]
Handler = Callable[[Dict[str, Any], Flow, Optional[HistoryStore]], ToolResult]

CHILD_OFFSET_X = 200.0


def resolve_node_reference(flow: Flow, reference: Optional[str]) -> Optional[Node]:
    """
    Find a node by id, falling back to its sanitized label.

    Lets a caller point at a node it created earlier in the same batch by
    its human label ("Home") before it knows the generated id ("home").
    """
    if not reference:
        return None

    node = flow.get_node(str(reference))
    if node is not None:
        return node

    wanted = sanitize_id(reference)
    if not wanted:
        return None

    node = flow.get_node(wanted)
    if node is not None:
        return node

    for node in flow.nodes:
        if sanitize_id(node.label) == wanted:
            return node
    return None


def _require(params: Mapping[str, Any], *keys: str, message: str) -> None:
    for key in keys:
        value = params.get(key)
        if value is None or value == "":
            raise FlowValidationError(message)


def _parse_position(value: Any) -> Position:
    if isinstance(value, Position):
        return value
    if not isinstance(value, Mapping):
        raise FlowValidationError("position must be an object with numeric x and y")
    x, y = value.get("x"), value.get("y")
    for coord in (x, y):
        if isinstance(coord, bool) or not isinstance(coord, (int, float)):
            raise FlowValidationError("position must be an object with numeric x and y")
    return Position(x=float(x), y=float(y))


def _unique_id(flow: Flow, candidate: str, prefix: str = "") -> str:
    node_id = candidate
    while not node_id or flow.has_node(node_id):
        node_id = generate_id(prefix)
    return node_id


def _release_members(flow: Flow, group: Node) -> List[Node]:
    """
    Nodes with the group removed and its direct members moved up one level.
    """
    released: List[Node] = []
    for node in flow.nodes:
        if node.id == group.id:
            continue
        if node.parent_group_id == group.id:
            node = node.evolve(
                parent_group_id=group.parent_group_id,
                hidden=False,
                group_hidden=False,
                subtree_hidden=None,
            )
        released.append(node)
    return released


class MutationExecutor:
    """
    Applies named operations to a flow.

    Every operation takes the current flow and returns a new one inside a
    ToolResult; the input flow is never modified. Validation problems come
    back as failed results, and so does anything unexpected, with the
    original message kept.
    """

    def __init__(
        self,
        *,
        layout_config: LayoutConfig | None = None,
        layout_fn: LayoutFn | None = None,
    ) -> None:
        self.layout_config = layout_config or LayoutConfig()
        self.layout_fn = layout_fn or partial(
            apply_layered_layout,
            direction=self.layout_config.direction,
            node_dimensions=NodeDimensions(
                width=self.layout_config.node_width,
                height=self.layout_config.node_height,
            ),
            spacing=LayoutSpacing(
                rank=self.layout_config.rank_spacing,
                node=self.layout_config.node_spacing,
            ),
        )

        self._handlers: Dict[str, Handler] = {
            "addNode": self._add_node,
            "updateNode": self._update_node,
            "deleteNode": self._delete_node,
            "addEdge": self._add_edge,
            "updateEdge": self._update_edge,
            "deleteEdge": self._delete_edge,
            "createGroup": self._create_group,
            "ungroup": self._ungroup,
            "toggleGroupExpansion": self._toggle_group_expansion,
            "toggleSubtreeCollapse": self._toggle_subtree_collapse,
            "autoLayout": self._auto_layout,
            "undo": self._undo,
            "redo": self._redo,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute(
        self,
        name: str,
        params: Optional[Mapping[str, Any]],
        flow: Flow,
        *,
        history: Optional[HistoryStore] = None,
    ) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            return ToolResult.failure(f"Unknown tool: {name}", tool=name)

        logger = logging.getLogger("flowscaffold.executor")
        try:
            result = handler(dict(params or {}), flow, history)
        except FlowValidationError as exc:
            logger.info("%s rejected: %s", name, exc)
            return ToolResult.failure(str(exc), tool=name)
        except Exception as exc:
            logger.exception("%s failed unexpectedly", name)
            return ToolResult.failure(str(exc) or exc.__class__.__name__, tool=name)

        return result.with_tool(name)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _add_node(self, params, flow, history) -> ToolResult:
        label = params.get("label")
        if not label or not isinstance(label, str):
            raise FlowValidationError("label is required")

        explicit_id = params.get("id")
        if explicit_id:
            node_id = str(explicit_id)
            if flow.has_node(node_id):
                raise FlowValidationError(
                    f'Node ID "{node_id}" already exists. Please choose a different ID.'
                )
        else:
            node_id = _unique_id(flow, sanitize_id(label))

        parent_ref = params.get("parentNodeId")
        parent: Optional[Node] = None
        if parent_ref:
            parent = resolve_node_reference(flow, parent_ref)
            if parent is None:
                raise FlowValidationError(f"Parent node {parent_ref} not found")

        node = Node(
            id=node_id,
            label=label,
            position=(
                Position(x=parent.position.x + CHILD_OFFSET_X, y=parent.position.y)
                if parent
                else Position()
            ),
            description=params.get("description") or None,
            parent_group_id=parent.parent_group_id if parent else None,
        )

        nodes = list(flow.nodes) + [node]
        edges = list(flow.edges)

        edge_id = None
        if parent is not None:
            edge_id = generate_id()
            edges.append(
                Edge(
                    id=edge_id,
                    source=parent.id,
                    target=node_id,
                    label=params.get("edgeLabel") or None,
                )
            )

        return ToolResult.ok(Flow.of(nodes, edges), node_id=node_id, edge_id=edge_id)

    def _update_node(self, params, flow, history) -> ToolResult:
        _require(params, "nodeId", message="nodeId is required")
        node_id = params["nodeId"]

        node = flow.get_node(node_id)
        if node is None:
            raise FlowValidationError(f"Node {node_id} not found")

        changes: Dict[str, Any] = {}
        if params.get("label") is not None:
            changes["label"] = params["label"]
        if params.get("description") is not None:
            changes["description"] = params["description"]
        if params.get("position") is not None:
            changes["position"] = _parse_position(params["position"])

        return ToolResult.ok(flow.replace_node(node.evolve(**changes)), node_id=node_id)

    def _delete_node(self, params, flow, history) -> ToolResult:
        _require(params, "nodeId", message="nodeId is required")
        node_id = params["nodeId"]

        node = flow.get_node(node_id)
        if node is None:
            raise FlowValidationError(f"Node {node_id} not found")

        if node.is_group:
            nodes = _release_members(flow, node)
        else:
            nodes = [n for n in flow.nodes if n.id != node_id]

        edges = [e for e in flow.edges if not e.touches(node_id)]
        return ToolResult.ok(Flow.of(nodes, edges))

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _add_edge(self, params, flow, history) -> ToolResult:
        _require(
            params,
            "sourceNodeId",
            "targetNodeId",
            message="sourceNodeId and targetNodeId are required",
        )
        source, target = params["sourceNodeId"], params["targetNodeId"]

        if not flow.has_node(source):
            raise FlowValidationError(f"Source node {source} not found")
        if not flow.has_node(target):
            raise FlowValidationError(f"Target node {target} not found")

        edge = Edge(
            id=generate_id(),
            source=source,
            target=target,
            label=params.get("label") or None,
        )
        return ToolResult.ok(flow.with_edges(list(flow.edges) + [edge]), edge_id=edge.id)

    def _update_edge(self, params, flow, history) -> ToolResult:
        _require(params, "edgeId", "label", message="edgeId and label are required")
        edge_id = params["edgeId"]

        edge = flow.get_edge(edge_id)
        if edge is None:
            raise FlowValidationError(f"Edge {edge_id} not found")

        return ToolResult.ok(
            flow.replace_edge(edge.evolve(label=params["label"])), edge_id=edge_id
        )

    def _delete_edge(self, params, flow, history) -> ToolResult:
        _require(params, "edgeId", message="edgeId is required")
        edge_id = params["edgeId"]

        if flow.get_edge(edge_id) is None:
            raise FlowValidationError(f"Edge {edge_id} not found")

        return ToolResult.ok(flow.with_edges(e for e in flow.edges if e.id != edge_id))

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def _create_group(self, params, flow, history) -> ToolResult:
        member_ids = params.get("memberIds")
        if not isinstance(member_ids, (list, tuple)) or len(member_ids) < 2:
            raise FlowValidationError("At least 2 memberIds are required")
        member_ids = [str(m) for m in member_ids]

        check = validate_group_membership(member_ids, flow.nodes)
        if not check.valid:
            raise FlowValidationError(check.error)

        members = [flow.get_node(m) for m in member_ids]
        shared_parent = members[0].parent_group_id

        if params.get("position") is not None:
            position = _parse_position(params["position"])
        else:
            x, y = group_anchor((m.position.x, m.position.y) for m in members)
            position = Position(x=x, y=y)

        group_id = _unique_id(flow, "", prefix="group-")
        group = Node(
            id=group_id,
            label=params.get("label") or f"Group {len(flow.groups()) + 1}",
            kind="group",
            position=position,
            parent_group_id=shared_parent,
            is_collapsed=True,
            hidden=False,
            group_hidden=False,
        )

        selected = set(member_ids)
        nodes = [
            n.evolve(parent_group_id=group_id, hidden=True) if n.id in selected else n
            for n in flow.nodes
        ]
        nodes.append(group)

        return ToolResult.ok(flow.with_nodes(nodes), group_id=group_id)

    def _ungroup(self, params, flow, history) -> ToolResult:
        _require(params, "groupId", message="groupId is required")
        group_id = params["groupId"]

        group = flow.get_node(group_id)
        if group is None or not group.is_group:
            raise FlowValidationError(f"Group {group_id} not found")
        if not flow.members_of(group_id):
            raise FlowValidationError(f"Group {group_id} has no members")

        nodes = _release_members(flow, group)
        edges = [e for e in flow.edges if not e.touches(group_id)]
        return ToolResult.ok(Flow.of(nodes, edges), group_id=group_id)

    def _toggle_group_expansion(self, params, flow, history) -> ToolResult:
        _require(params, "groupId", message="groupId is required")
        group_id = params["groupId"]

        group = flow.get_node(group_id)
        if group is None or not group.is_group:
            raise FlowValidationError(f"Group {group_id} not found")

        expand = params.get("expand")
        if expand is None:
            expand = group.is_collapsed is True
        elif not isinstance(expand, bool):
            raise FlowValidationError("expand must be a boolean")

        nodes: List[Node] = []
        for node in flow.nodes:
            if node.id == group_id:
                node = node.evolve(is_collapsed=not expand, hidden=False, group_hidden=False)
            elif node.parent_group_id == group_id:
                node = node.evolve(hidden=not expand)
            nodes.append(node)

        return ToolResult.ok(flow.with_nodes(nodes), group_id=group_id)

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def _toggle_subtree_collapse(self, params, flow, history) -> ToolResult:
        _require(params, "nodeId", message="nodeId is required")
        node_id = params["nodeId"]

        collapsed = params.get("collapsed")
        if not isinstance(collapsed, bool):
            raise FlowValidationError("collapsed must be a boolean (true or false)")

        if not flow.has_node(node_id):
            raise FlowValidationError(f"Node {node_id} not found")

        return ToolResult.ok(
            collapse_subtree_by_handles(flow, node_id, collapsed), node_id=node_id
        )

    def _auto_layout(self, params, flow, history) -> ToolResult:
        view_nodes, view_edges = apply_group_visibility(flow.nodes, flow.edges)
        laid_out, _ = self.layout_fn(list(view_nodes), list(view_edges))
        positions = {n.id: n.position for n in laid_out}

        tolerance = self.layout_config.position_tolerance
        changed = False
        nodes: List[Node] = []
        for node in flow.nodes:
            target = positions.get(node.id)
            if target is not None and not points_close(
                (node.position.x, node.position.y), (target.x, target.y), tolerance
            ):
                changed = True
                node = node.evolve(position=target)
            nodes.append(node)

        if not changed:
            return ToolResult.ok(flow, did_change=False)
        return ToolResult.ok(flow.with_nodes(nodes), did_change=True)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _undo(self, params, flow, history) -> ToolResult:
        if history is None:
            raise FlowValidationError("History is not available")
        restored = history.undo()
        if restored is None:
            return ToolResult.failure("Nothing to undo")
        return ToolResult.ok(restored, restored=True)

    def _redo(self, params, flow, history) -> ToolResult:
        if history is None:
            raise FlowValidationError("History is not available")
        restored = history.redo()
        if restored is None:
            return ToolResult.failure("Nothing to redo")
        return ToolResult.ok(restored, restored=True)
