from __future__ import annotations

from typing import Dict, Iterable, List, Set, Tuple

from flowscaffold.graph.flow_graph import FlowGraph
from flowscaffold.graph.flow_schema import Edge, Flow, Node


GROUP_EDGE_PREFIX = "group-edge-"


def _ancestor_hidden_set(nodes: List[Node]) -> Set[str]:
    """
    Ids of nodes that sit (at any depth) inside a collapsed group.
    """
    by_id: Dict[str, Node] = {n.id: n for n in nodes}
    memo: Dict[str, bool] = {}

    def hidden_by_ancestor(node: Node) -> bool:
        if node.id in memo:
            return memo[node.id]

        seen = {node.id}
        result = False
        current = node
        while current.parent_group_id:
            parent = by_id.get(current.parent_group_id)
            if parent is None or parent.id in seen:
                break
            if parent.is_collapsed is True:
                result = True
                break
            seen.add(parent.id)
            current = parent

        memo[node.id] = result
        return result

    return {n.id for n in nodes if hidden_by_ancestor(n)}


def _node_visibility(node: Node, hidden_by_ancestor: bool) -> Node:
    subtree_hidden = node.subtree_hidden is True

    if node.is_group:
        # An expanded group gives way to its members.
        own_hidden = node.is_collapsed is not True
    else:
        # Keep hiding that was not caused by a group on the previous pass.
        own_hidden = bool(node.hidden) and not bool(node.group_hidden)

    return node.evolve(
        group_hidden=hidden_by_ancestor,
        hidden=hidden_by_ancestor or subtree_hidden or own_hidden,
        subtree_hidden=True if subtree_hidden else None,
    )


def synthetic_edge_id(source: str, target: str) -> str:
    return f"{GROUP_EDGE_PREFIX}{source}->{target}"


def compute_synthetic_edges(nodes: Iterable[Node], edges: Iterable[Edge]) -> List[Edge]:
    """
    Boundary edges for every collapsed group.

    A stored edge with exactly one endpoint inside a collapsed group is
    redrawn between the group and the outside endpoint. One synthetic edge
    is produced per (group, outside endpoint, direction), however many
    stored edges cross that boundary.
    """
    nodes = list(nodes)
    real_edges = [e for e in edges if not e.is_synthetic_group_edge]
    graph = FlowGraph(nodes, real_edges)

    synthetic: Dict[str, Edge] = {}
    for group in nodes:
        if not group.is_group or group.is_collapsed is not True:
            continue

        members = graph.group_descendants(group.id)
        for edge in real_edges:
            source_inside = edge.source in members
            target_inside = edge.target in members

            if source_inside and not target_inside:
                source, target = group.id, edge.target
            elif target_inside and not source_inside:
                source, target = edge.source, group.id
            else:
                continue

            edge_id = synthetic_edge_id(source, target)
            if edge_id not in synthetic:
                synthetic[edge_id] = Edge(
                    id=edge_id,
                    source=source,
                    target=target,
                    is_synthetic_group_edge=True,
                )

    return list(synthetic.values())


def apply_group_visibility(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
) -> Tuple[Tuple[Node, ...], Tuple[Edge, ...]]:
    """
    Derive render visibility from group and collapse state.

    - a node is group_hidden when any ancestor group is collapsed
    - hidden = group_hidden or subtree_hidden or the node's own state
    - synthetic boundary edges are rebuilt from scratch on every call
    - an edge is hidden when either endpoint is hidden

    Pure and idempotent: feeding the output back in yields the same output.
    """
    nodes = list(nodes)
    edges = list(edges)

    ancestor_hidden = _ancestor_hidden_set(nodes)
    next_nodes = [_node_visibility(n, n.id in ancestor_hidden) for n in nodes]
    lookup: Dict[str, Node] = {n.id: n for n in next_nodes}

    real_edges = [e for e in edges if not e.is_synthetic_group_edge]
    all_edges = real_edges + compute_synthetic_edges(next_nodes, real_edges)

    next_edges: List[Edge] = []
    for edge in all_edges:
        source = lookup.get(edge.source)
        target = lookup.get(edge.target)
        group_hidden = bool(source and source.group_hidden) or bool(
            target and target.group_hidden
        )
        hidden = bool(source and source.hidden) or bool(target and target.hidden)
        next_edges.append(edge.evolve(group_hidden=group_hidden, hidden=hidden))

    return tuple(next_nodes), tuple(next_edges)


def visible_flow(flow: Flow) -> Flow:
    """
    The flow as it should be handed to rendering.
    """
    nodes, edges = apply_group_visibility(flow.nodes, flow.edges)
    return Flow(nodes=nodes, edges=edges)
