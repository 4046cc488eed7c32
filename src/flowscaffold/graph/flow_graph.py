from __future__ import annotations

import networkx as nx
from typing import Iterable, Set

from flowscaffold.graph.flow_schema import Edge, Flow, Node


class FlowGraph:
    """
    Read-only traversal view over a Flow.

    Holds two directed graphs built from the same node list:
    - connections: one arc per stored edge, source -> target
    - containment: one arc per membership, group -> member

    Traversals never touch the Flow, and both graphs tolerate cycles.
    """

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge] = ()) -> None:
        self._connections = nx.MultiDiGraph()
        self._containment = nx.DiGraph()

        nodes = list(nodes)
        for node in nodes:
            self._connections.add_node(node.id)
            self._containment.add_node(node.id)

        for node in nodes:
            parent = node.parent_group_id
            if parent and parent in self._containment and parent != node.id:
                self._containment.add_edge(parent, node.id)

        for edge in edges:
            if edge.is_synthetic_group_edge:
                continue
            if edge.source in self._connections and edge.target in self._connections:
                self._connections.add_edge(edge.source, edge.target, key=edge.id)

    @staticmethod
    def from_flow(flow: Flow) -> "FlowGraph":
        return FlowGraph(flow.nodes, flow.edges)

    # -------------------- Edge-based traversal --------------------

    def edge_descendants(self, node_id: str) -> Set[str]:
        if node_id not in self._connections:
            return set()
        found = nx.descendants(self._connections, node_id)
        found.discard(node_id)
        return found

    # -------------------- Group-based traversal --------------------

    def group_descendants(self, node_id: str) -> Set[str]:
        if node_id not in self._containment:
            return set()
        found = nx.descendants(self._containment, node_id)
        found.discard(node_id)
        return found
