from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set

from flowscaffold.graph.flow_graph import FlowGraph
from flowscaffold.graph.flow_schema import Node


@dataclass(frozen=True)
class MembershipCheck:
    valid: bool
    error: Optional[str] = None


def detect_circular_reference(
    node_id: str,
    potential_parent_id: str,
    nodes: Iterable[Node],
) -> bool:
    """
    True if placing node_id inside potential_parent_id would close a loop,
    i.e. potential_parent_id is already nested under node_id.
    """
    nodes = list(nodes)
    known = {n.id for n in nodes}
    if node_id not in known or potential_parent_id not in known:
        return False
    return potential_parent_id in FlowGraph(nodes).group_descendants(node_id)


def validate_group_membership(
    selected_ids: Sequence[str],
    nodes: Iterable[Node],
) -> MembershipCheck:
    """
    Pre-check for grouping selected_ids together.

    Rejects fewer than two members, duplicates, unknown ids, a member that
    is nested inside another selected member, and members that live in
    different parent groups.
    """
    if len(selected_ids) < 2:
        return MembershipCheck(False, "Group must contain at least 2 nodes")

    if len(set(selected_ids)) != len(selected_ids):
        return MembershipCheck(False, "Cannot group duplicate nodes")

    nodes = list(nodes)
    by_id: Dict[str, Node] = {n.id: n for n in nodes}

    for node_id in selected_ids:
        if node_id not in by_id:
            return MembershipCheck(False, f"Node {node_id} not found")

    graph = FlowGraph(nodes)
    descendants: Dict[str, Set[str]] = {
        node_id: graph.group_descendants(node_id) for node_id in selected_ids
    }

    ids: List[str] = list(selected_ids)
    for i, a in enumerate(ids):
        for b in ids[i + 1:]:
            if b in descendants[a] or a in descendants[b]:
                return MembershipCheck(False, "Cannot group node with its descendant")

    parents = {by_id[node_id].parent_group_id for node_id in selected_ids}
    if len(parents) > 1:
        return MembershipCheck(False, "Cannot group nodes from different parent groups")

    return MembershipCheck(True)
