from __future__ import annotations

from typing import Iterable, Set

from flowscaffold.graph.flow_graph import FlowGraph
from flowscaffold.graph.flow_schema import Edge, Node


def get_edge_descendants(
    node_id: str,
    nodes: Iterable[Node],
    edges: Iterable[Edge],
) -> Set[str]:
    """
    Every node reachable from node_id by following edges source -> target.
    """
    return FlowGraph(nodes, edges).edge_descendants(node_id)


def get_group_descendants(node_id: str, nodes: Iterable[Node]) -> Set[str]:
    """
    Every node nested under node_id through parent_group_id, at any depth.
    """
    return FlowGraph(nodes).group_descendants(node_id)
