"""Post-build graph analysis: connected components and their scores."""

from __future__ import annotations

import logging
import math

from depmap.model import Component, DependencyGraph

logger = logging.getLogger(__name__)


def component_score(node_count: int, edge_count: int) -> float:
    """Score a component of *node_count* nodes and *edge_count* internal edges.

    Size is rewarded logarithmically, connectivity linearly, and a density
    bonus (edges relative to the ``n * (n - 1)`` possible directed edges) is
    scaled by the component size.
    """
    if node_count == 0:
        return 0.0

    node_score = node_count * math.log2(node_count + 1)
    edge_score = edge_count * 2.0

    max_possible_edges = node_count * (node_count - 1)
    if max_possible_edges > 0:
        density = edge_count / max_possible_edges
        density_bonus = density * node_count * 5.0
        return node_score + edge_score + density_bonus

    return node_score + edge_score


def _undirected_adjacency(graph: DependencyGraph) -> dict[str, list[str]]:
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in graph.nodes}
    for source, targets in graph.edges.items():
        if source not in adjacency:
            continue
        for target in targets:
            if target not in adjacency:
                continue
            adjacency[source].append(target)
            adjacency[target].append(source)
    return adjacency


def find_components(graph: DependencyGraph) -> list[list[str]]:
    """Return the member ids of each connected component, edges read as undirected.

    Traversal uses an explicit stack so component size is not bounded by the
    interpreter's recursion limit.
    """
    adjacency = _undirected_adjacency(graph)
    visited: set[str] = set()
    components: list[list[str]] = []

    for seed in sorted(adjacency):
        if seed in visited:
            continue
        visited.add(seed)
        members: list[str] = []
        stack = [seed]
        while stack:
            node_id = stack.pop()
            members.append(node_id)
            for neighbor in adjacency[node_id]:
                if neighbor not in visited:
                    visited.add(neighbor)
                    stack.append(neighbor)
        members.sort()
        components.append(members)

    return components


def _internal_edge_count(graph: DependencyGraph, members: list[str]) -> int:
    member_set = set(members)
    count = 0
    for node_id in members:
        for target in graph.edges.get(node_id, ()):
            if target in member_set:
                count += 1
    return count


def compute_components(graph: DependencyGraph) -> list[Component]:
    """Find, score and rank the components of *graph*.

    Components are sorted by descending score; equal scores are ordered by
    their smallest member id. Ids are reassigned ``0..k-1`` in that order and
    written back onto every member node. Any previous result is replaced.
    """
    components: list[Component] = []
    for members in find_components(graph):
        edge_count = _internal_edge_count(graph, members)
        components.append(
            Component(
                id=-1,
                member_ids=members,
                edge_count=edge_count,
                score=component_score(len(members), edge_count),
            )
        )

    components.sort(key=lambda c: (-c.score, c.member_ids[0]))

    for index, component in enumerate(components):
        component.id = index
        for node_id in component.member_ids:
            node = graph.nodes[node_id]
            node.component_id = index
            node.component_score = component.score

    graph.components = components
    logger.debug(
        "Components: %d (largest: %s)",
        len(components),
        len(components[0].member_ids) if components else 0,
    )
    return components
