"""Build a dependency graph from a loaded semantic model."""

from __future__ import annotations

from depmap.collector import DefinitionCollector
from depmap.model import DependencyGraph
from depmap.resolver import ReferenceResolver
from depmap.semantic.base import SemanticModel


def build_graph(model: SemanticModel, *, workers: int = 1) -> DependencyGraph:
    """Collect every declaration first, then resolve the uses inside each body."""
    graph = DependencyGraph()

    collector = DefinitionCollector(graph)
    collector.collect(model.declarations())

    resolver = ReferenceResolver(model, graph, collector.lookup)
    resolver.resolve_all(collector.definitions, workers=workers)

    return graph
