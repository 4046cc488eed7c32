from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Tuple

import networkx as nx

from flowscaffold.graph.flow_schema import Edge, Node, Position


@dataclass(frozen=True)
class NodeDimensions:
    width: float = 172.0
    height: float = 70.0


@dataclass(frozen=True)
class LayoutSpacing:
    rank: float = 50.0
    node: float = 40.0


def _rank_nodes(node_ids: List[str], edges: List[Edge]) -> Dict[str, int]:
    """
    Longest-path ranking. Cycles are condensed so every node in a strongly
    connected component shares one rank.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(node_ids)
    graph.add_edges_from((e.source, e.target) for e in edges)

    condensed = nx.condensation(graph)
    component_rank: Dict[int, int] = {}
    for component in nx.topological_sort(condensed):
        preds = list(condensed.predecessors(component))
        component_rank[component] = (
            max(component_rank[p] for p in preds) + 1 if preds else 0
        )

    mapping = condensed.graph["mapping"]
    return {node_id: component_rank[mapping[node_id]] for node_id in node_ids}


def apply_layered_layout(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    direction: Literal["LR", "TB"] = "LR",
    node_dimensions: NodeDimensions = NodeDimensions(),
    spacing: LayoutSpacing = LayoutSpacing(),
) -> Tuple[List[Node], List[Edge]]:
    """
    Place visible nodes in ranks following edge direction.

    Hidden nodes keep their positions. Within a rank, nodes are ordered by
    parent group and then by document order so members of a group stay
    contiguous. The result is deterministic for a given input.
    """
    nodes = list(nodes)
    edges = list(edges)

    order = {n.id: i for i, n in enumerate(nodes)}
    visible = sorted(
        (n for n in nodes if not n.hidden),
        key=lambda n: (n.parent_group_id or "", order[n.id]),
    )
    visible_ids = [n.id for n in visible]
    visible_set = set(visible_ids)
    visible_edges = [
        e for e in edges if e.source in visible_set and e.target in visible_set
    ]

    if not visible_ids:
        return nodes, edges

    ranks = _rank_nodes(visible_ids, visible_edges)

    by_rank: Dict[int, List[str]] = {}
    for node_id in visible_ids:
        by_rank.setdefault(ranks[node_id], []).append(node_id)

    horizontal = direction == "LR"
    rank_step = (
        node_dimensions.width if horizontal else node_dimensions.height
    ) + spacing.rank
    slot_step = (
        node_dimensions.height if horizontal else node_dimensions.width
    ) + spacing.node

    positions: Dict[str, Position] = {}
    for rank, members in by_rank.items():
        offset = (len(members) - 1) / 2.0
        for slot, node_id in enumerate(members):
            along = rank * rank_step
            across = (slot - offset) * slot_step
            positions[node_id] = (
                Position(x=along, y=across) if horizontal else Position(x=across, y=along)
            )

    laid_out = [
        n.evolve(position=positions[n.id]) if n.id in positions else n for n in nodes
    ]
    return laid_out, edges
