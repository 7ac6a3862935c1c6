"""Language-agnostic data model for symbol dependency graphs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NodeKind(str, Enum):
    """Kind of a tracked symbol, decided once at collection time."""

    FUNCTION = "function"
    METHOD = "method"
    TYPE = "type"


@dataclass(frozen=True)
class Receiver:
    """The type a method is declared on."""

    type_name: str
    by_reference: bool = False

    def qualify(self, method_name: str) -> str:
        """Return the display name for *method_name* declared on this receiver."""
        if self.by_reference:
            return f"(*{self.type_name}).{method_name}"
        return f"{self.type_name}.{method_name}"


@dataclass
class Node:
    """A function, method, or type declaration inside the project."""

    id: str
    name: str
    kind: NodeKind
    scope: str
    file: str
    line: int
    signature: str
    receiver: Receiver | None = None
    component_id: int = 0
    component_score: float = 0.0

    def to_dict(self) -> dict:
        d: dict = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "scope": self.scope,
            "file": self.file,
            "line": self.line,
            "signature": self.signature,
            "componentID": self.component_id,
            "componentScore": self.component_score,
        }
        if self.receiver is not None:
            d["receiver"] = {
                "type": self.receiver.type_name,
                "byReference": self.receiver.by_reference,
            }
        return d


@dataclass
class Component:
    """A maximal set of nodes connected when edges are read as undirected."""

    id: int
    member_ids: list[str]
    edge_count: int = 0
    score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "memberIDs": self.member_ids,
            "edgeCount": self.edge_count,
            "score": self.score,
        }


@dataclass
class DependencyGraph:
    """Nodes keyed by id and directed edges as ``source id -> [target ids]``."""

    nodes: dict[str, Node] = field(default_factory=dict)
    edges: dict[str, list[str]] = field(default_factory=dict)
    components: list[Component] = field(default_factory=list)

    def put_node(self, node: Node) -> None:
        # Later declarations with the same id replace earlier ones.
        self.nodes[node.id] = node

    def add_edges(self, source_id: str, target_ids: list[str]) -> None:
        """Append *target_ids* to the edge list of *source_id*.

        Callers are responsible for dropping self references and duplicates.
        """
        if not target_ids:
            return
        self.edges.setdefault(source_id, []).extend(target_ids)

    def count_edges(self) -> int:
        return sum(len(targets) for targets in self.edges.values())

    def compute_components(self) -> list[Component]:
        """Partition, score and rank the graph's connected components."""
        from depmap.analysis import compute_components

        return compute_components(self)

    def component_by_id(self, component_id: int) -> Component | None:
        for component in self.components:
            if component.id == component_id:
                return component
        return None

    def node_component(self, node_id: str) -> Component | None:
        """Return the component that owns *node_id*, or None if the node is unknown."""
        node = self.nodes.get(node_id)
        if node is None:
            return None
        component = self.component_by_id(node.component_id)
        if component is None or node_id not in component.member_ids:
            return None
        return component

    def largest_component(self) -> Component | None:
        """Return the highest-scored component (components are kept sorted)."""
        if not self.components:
            return None
        return self.components[0]

    def to_dict(self) -> dict:
        data: dict = {
            "nodes": {nid: self.nodes[nid].to_dict() for nid in sorted(self.nodes)},
            "edges": {src: list(self.edges[src]) for src in sorted(self.edges)},
        }
        if self.components:
            data["components"] = [c.to_dict() for c in self.components]
        return data
