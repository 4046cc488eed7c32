"""
Graph document subsystem for flowscaffold.

Defines the diagram document (nodes, edges, groups) and the traversal
view used by visibility derivation and mutation checks.
"""

from flowscaffold.graph.flow_schema import Position, Node, Edge, Flow
from flowscaffold.graph.flow_graph import FlowGraph

__all__ = [
    "Position",
    "Node",
    "Edge",
    "Flow",
    "FlowGraph",
]
