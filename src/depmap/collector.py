"""Collect project declarations into graph nodes."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable

from depmap.model import DependencyGraph, Node, NodeKind
from depmap.semantic.base import Declaration

logger = logging.getLogger(__name__)

ID_SEPARATOR = "::"


def node_id(scope: str, name: str) -> str:
    return f"{scope}{ID_SEPARATOR}{name}"


def display_name(decl: Declaration) -> str:
    """Return the node name for *decl*, qualified by receiver for methods."""
    if decl.kind is NodeKind.METHOD and decl.receiver is not None:
        return decl.receiver.qualify(decl.name)
    return decl.name


class DefinitionCollector:
    """Turn declaration records into nodes and remember which key made which node."""

    def __init__(self, graph: DependencyGraph):
        self.graph = graph
        self.lookup: dict[Hashable, Node] = {}
        self.definitions: list[tuple[Declaration, Node]] = []

    def collect(self, declarations: Iterable[Declaration]) -> None:
        dropped = 0
        for decl in declarations:
            if not decl.in_project:
                dropped += 1
                continue
            self.add(decl)

        logger.info("Found %d definitions inside the project.", len(self.lookup))
        if dropped:
            logger.debug("Skipped %d declarations outside the project.", dropped)

    def add(self, decl: Declaration) -> Node:
        name = display_name(decl)
        node = Node(
            id=node_id(decl.scope, name),
            name=name,
            kind=decl.kind,
            scope=decl.scope,
            file=decl.path.name,
            line=decl.line,
            signature=decl.signature,
            receiver=decl.receiver,
        )
        self.lookup[decl.key] = node
        self.definitions.append((decl, node))
        self.graph.put_node(node)
        return node
