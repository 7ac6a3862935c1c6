"""Resolve identifier uses inside definitions into graph edges."""

from __future__ import annotations

import logging
from collections.abc import Hashable
from concurrent.futures import ThreadPoolExecutor

from depmap.model import DependencyGraph, Node
from depmap.semantic.base import Declaration, SemanticModel

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Add an edge from each definition to every in-project symbol it uses."""

    def __init__(
        self,
        model: SemanticModel,
        graph: DependencyGraph,
        lookup: dict[Hashable, Node],
    ):
        self.model = model
        self.graph = graph
        self.lookup = lookup

    def dependencies(self, decl: Declaration, source: Node) -> list[str]:
        """Return the distinct target ids used by *decl*, excluding itself.

        Uses that the model cannot resolve, or that resolve outside the
        collected definitions (standard library, third-party code), are
        ignored.
        """
        seen: set[str] = set()
        targets: list[str] = []
        for occurrence in self.model.occurrences(decl):
            key = self.model.resolve(occurrence)
            if key is None:
                continue
            target = self.lookup.get(key)
            if target is None or target.id == source.id:
                continue
            if target.id not in seen:
                seen.add(target.id)
                targets.append(target.id)
        return targets

    def resolve_all(
        self, definitions: list[tuple[Declaration, Node]], workers: int = 1
    ) -> None:
        logger.info("Analyzing function dependencies...")
        sources = [(decl, node) for decl, node in definitions if decl.has_body]

        if workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(
                    pool.map(lambda item: self.dependencies(*item), sources)
                )
        else:
            results = [self.dependencies(decl, node) for decl, node in sources]

        # Declarations sharing a node id (overloads) merge into one target list.
        merged: dict[str, set[str]] = {
            src: set(targets) for src, targets in self.graph.edges.items()
        }
        for (_, node), targets in zip(sources, results):
            seen = merged.setdefault(node.id, set())
            fresh = [t for t in targets if t not in seen]
            seen.update(fresh)
            if fresh:
                self.graph.add_edges(node.id, fresh)

        logger.debug(
            "Resolved %d definitions into %d edges",
            len(sources),
            self.graph.count_edges(),
        )
