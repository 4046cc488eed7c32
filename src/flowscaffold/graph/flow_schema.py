from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Literal, Optional, Tuple

from flowscaffold.utils.text import fingerprint


NodeKind = Literal["plain", "group"]


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "Position":
        if not data:
            return Position()
        return Position(x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)))


@dataclass(frozen=True)
class Node:
    """
    A box on the canvas, either a plain node or a group.

    hidden, group_hidden and subtree_hidden are render flags. A value of
    None means the flag is absent, which is not the same as False:
    subtree_hidden is only ever True or absent.
    """

    id: str
    label: str
    kind: NodeKind = "plain"
    position: Position = Position()
    description: Optional[str] = None

    parent_group_id: Optional[str] = None

    collapsed: Optional[bool] = None
    is_collapsed: Optional[bool] = None

    hidden: Optional[bool] = None
    group_hidden: Optional[bool] = None
    subtree_hidden: Optional[bool] = None

    @property
    def is_group(self) -> bool:
        return self.kind == "group"

    def evolve(self, **changes: Any) -> "Node":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "position": self.position.to_dict(),
            "label": self.label,
        }
        optional = {
            "description": self.description,
            "parentGroupId": self.parent_group_id,
            "collapsed": self.collapsed,
            "isCollapsed": self.is_collapsed,
            "hidden": self.hidden,
            "groupHidden": self.group_hidden,
            "subtreeHidden": self.subtree_hidden,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Node":
        # Older documents nest label/description under "data" and use
        # "type" for the node kind.
        legacy = data.get("data") or {}
        kind = data.get("kind") or ("group" if data.get("type") == "group" else "plain")
        return Node(
            id=str(data["id"]),
            label=data.get("label", legacy.get("label", "")),
            kind=kind,
            position=Position.from_dict(data.get("position")),
            description=data.get("description", legacy.get("description")),
            parent_group_id=data.get("parentGroupId"),
            collapsed=data.get("collapsed", legacy.get("collapsed")),
            is_collapsed=data.get("isCollapsed"),
            hidden=data.get("hidden"),
            group_hidden=data.get("groupHidden"),
            subtree_hidden=data.get("subtreeHidden"),
        )


@dataclass(frozen=True)
class Edge:
    """
    Directed connection between two nodes.
    """

    id: str
    source: str
    target: str
    label: Optional[str] = None

    hidden: Optional[bool] = None
    group_hidden: Optional[bool] = None
    is_synthetic_group_edge: Optional[bool] = None

    def evolve(self, **changes: Any) -> "Edge":
        return replace(self, **changes)

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
        }
        optional = {
            "label": self.label,
            "hidden": self.hidden,
            "groupHidden": self.group_hidden,
            "isSyntheticGroupEdge": self.is_synthetic_group_edge,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Edge":
        legacy = data.get("data") or {}
        return Edge(
            id=str(data["id"]),
            source=str(data["source"]),
            target=str(data["target"]),
            label=data.get("label", legacy.get("label")),
            hidden=data.get("hidden"),
            group_hidden=data.get("groupHidden"),
            is_synthetic_group_edge=data.get(
                "isSyntheticGroupEdge", legacy.get("isSyntheticGroupEdge")
            ),
        )


@dataclass(frozen=True)
class Flow:
    """
    The diagram document: an ordered list of nodes and edges.

    Flows are immutable values. Every operation returns a new Flow, so two
    flows compare equal exactly when they are structurally identical.
    """

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    @staticmethod
    def empty() -> "Flow":
        return Flow()

    @staticmethod
    def of(nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()) -> "Flow":
        return Flow(nodes=tuple(nodes), edges=tuple(edges))

    # -------------------- Lookup --------------------

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes)

    def groups(self) -> Tuple[Node, ...]:
        return tuple(n for n in self.nodes if n.is_group)

    def members_of(self, group_id: str) -> Tuple[Node, ...]:
        return tuple(n for n in self.nodes if n.parent_group_id == group_id)

    # -------------------- Derivation --------------------

    def with_nodes(self, nodes: Iterable[Node]) -> "Flow":
        return Flow(nodes=tuple(nodes), edges=self.edges)

    def with_edges(self, edges: Iterable[Edge]) -> "Flow":
        return Flow(nodes=self.nodes, edges=tuple(edges))

    def replace_node(self, node: Node) -> "Flow":
        return self.with_nodes(node if n.id == node.id else n for n in self.nodes)

    def replace_edge(self, edge: Edge) -> "Flow":
        return self.with_edges(edge if e.id == edge.id else e for e in self.edges)

    def without_synthetic(self) -> "Flow":
        """
        Drop render-only group boundary edges, leaving what may be stored.
        """
        return self.with_edges(e for e in self.edges if not e.is_synthetic_group_edge)

    # -------------------- Serialization --------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "Flow":
        if not data:
            return Flow()
        return Flow(
            nodes=tuple(Node.from_dict(n) for n in data.get("nodes") or []),
            edges=tuple(Edge.from_dict(e) for e in data.get("edges") or []),
        )

    def fingerprint(self) -> str:
        return fingerprint(self.to_dict())
