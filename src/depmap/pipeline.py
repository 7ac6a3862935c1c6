"""Orchestrator: detect → load → build → analyze → write."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from depmap.builder import build_graph
from depmap.config import FormatConfig, load_project_config
from depmap.detect import detect_model
from depmap.model import DependencyGraph
from depmap.renderer import get_writer

logger = logging.getLogger(__name__)


def run(
    project_dir: Path,
    *,
    output: Path | None = None,
    fmt: str | None = None,
    formatter_options: FormatConfig | None = None,
    components: bool | None = None,
    workers: int = 1,
) -> DependencyGraph:
    """Run the full depmap pipeline and return the graph that was written.

    Options left as None fall back to the project's ``.depmap.toml`` or
    ``[tool.depmap]`` settings. Output goes to stdout unless *output* is set.
    """
    project_dir = project_dir.resolve()
    logger.info("Analyzing project in: %s", project_dir)

    config = load_project_config(project_dir)
    fmt = fmt or config.format or "json"
    if components is None:
        components = config.components
    options = FormatConfig(config.formatter)
    options.update(formatter_options or {})

    model = detect_model(project_dir, config)
    if model is None:
        logger.error("Could not detect project type.")
        sys.exit(1)

    logger.debug("Semantic model: %s", type(model).__name__)
    model.load()

    graph = build_graph(model, workers=workers)
    if components:
        graph.compute_components()
        largest = graph.largest_component()
        if largest is not None:
            logger.info(
                "Largest component: %d nodes, %d edges, score %.2f",
                len(largest.member_ids),
                largest.edge_count,
                largest.score,
            )

    writer = get_writer(fmt)
    logger.debug("Using writer: %s", type(writer).__name__)
    if output is None:
        writer.write(sys.stdout, graph, options)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            writer.write(f, graph, options)
        logger.info("Generated %s", output)

    logger.info("Analysis complete.")
    logger.info("  Nodes: %d", len(graph.nodes))
    logger.info("  Edges: %d", graph.count_edges())
    return graph
