from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Union

from flowscaffold.graph.flow_schema import Edge, Flow, Node
from flowscaffold.visibility.descendants import get_edge_descendants


DescendantsFn = Callable[[str, List[Node], List[Edge]], Iterable[Union[str, Node]]]


def collapse_subtree_by_handles(
    flow: Flow,
    node_id: str,
    collapsed: bool,
    descendants_fn: Optional[DescendantsFn] = None,
) -> Flow:
    """
    Collapse or expand everything below node_id.

    The root gets its own collapsed flag. Each descendant is hidden (or
    shown) and carries subtree_hidden=True while hidden by this routine;
    the flag is dropped, not set to False, on expand. Edges touching any
    descendant follow the same hidden state.

    Group visibility is not applied here.
    """
    if not flow.has_node(node_id):
        return flow

    nodes = list(flow.nodes)
    edges = list(flow.edges)

    if descendants_fn is None:
        descendants_fn = get_edge_descendants

    descendant_ids = {
        entry if isinstance(entry, str) else entry.id
        for entry in descendants_fn(node_id, nodes, edges)
    }
    descendant_ids.discard(node_id)

    next_nodes: List[Node] = []
    for node in nodes:
        if node.id == node_id:
            next_nodes.append(node.evolve(collapsed=collapsed))
        elif node.id in descendant_ids:
            next_nodes.append(
                node.evolve(
                    hidden=collapsed,
                    subtree_hidden=True if collapsed else None,
                )
            )
        else:
            next_nodes.append(node)

    next_edges = [
        edge.evolve(hidden=collapsed)
        if edge.source in descendant_ids or edge.target in descendant_ids
        else edge
        for edge in edges
    ]

    return Flow.of(next_nodes, next_edges)
