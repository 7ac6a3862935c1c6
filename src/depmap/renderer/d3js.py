"""Write a DependencyGraph in D3.js force-graph format, optionally as an HTML page."""

from __future__ import annotations

import json
from pathlib import Path
from string import Template
from typing import TextIO

from depmap.config import FormatConfig
from depmap.model import DependencyGraph, NodeKind

_TEMPLATE_PATH = Path(__file__).with_name("d3js.html")

# Colour group per node kind.
_KIND_GROUP = {
    NodeKind.FUNCTION: 1,
    NodeKind.METHOD: 2,
    NodeKind.TYPE: 3,
}

_SCOPE_PADDING = 80
_TYPE_PADDING = 50


def to_d3(
    graph: DependencyGraph, *, group_by_scope: bool = True, group_by_type: bool = True
) -> dict:
    """Convert *graph* into ``{nodes, links, groups}`` for D3.js / WebCola."""
    nodes: list[dict] = []
    index: dict[str, int] = {}
    scope_nodes: dict[str, list[str]] = {}
    receiver_nodes: dict[str, dict[str, list[str]]] = {}
    with_components = bool(graph.components)

    for node_id in sorted(graph.nodes):
        node = graph.nodes[node_id]
        entry = {
            "id": node.id,
            "name": node.name,
            "kind": node.kind.value,
            "scope": node.scope,
            "file": node.file,
            "line": node.line,
            "signature": node.signature,
            "group": _KIND_GROUP[node.kind],
        }
        if with_components:
            entry["component"] = node.component_id
            entry["componentScore"] = node.component_score
        index[node.id] = len(nodes)
        nodes.append(entry)

        scope_nodes.setdefault(node.scope, []).append(node.id)
        if node.kind is NodeKind.METHOD and node.receiver is not None:
            by_type = receiver_nodes.setdefault(node.scope, {})
            by_type.setdefault(node.receiver.type_name, []).append(node.id)

    links = [
        {"source": source, "target": target, "value": 1}
        for source in sorted(graph.edges)
        for target in sorted(graph.edges[source])
    ]

    groups: list[dict] = []
    if group_by_scope:
        for scope in sorted(scope_nodes):
            types = receiver_nodes.get(scope) if group_by_type else None
            leaves: list[int] = []
            nested: list[int] = []
            for node_id in scope_nodes[scope]:
                if types and graph.nodes[node_id].receiver is not None:
                    continue
                leaves.append(index[node_id])
            for type_name in sorted(types or {}):
                nested.append(len(groups))
                groups.append(
                    _group(
                        f"{scope}::{type_name}",
                        type_name,
                        "type",
                        _TYPE_PADDING,
                        leaves=[index[nid] for nid in types[type_name]],
                    )
                )
            groups.append(
                _group(scope, scope, "scope", _SCOPE_PADDING, leaves=leaves, groups=nested)
            )

    data: dict = {"nodes": nodes, "links": links}
    if groups:
        data["groups"] = groups
    return data


def _group(
    group_id: str,
    label: str,
    level: str,
    padding: int,
    *,
    leaves: list[int],
    groups: list[int] | None = None,
) -> dict:
    group: dict = {"id": group_id, "label": label, "level": level, "padding": padding}
    if leaves:
        group["leaves"] = leaves
    if groups:
        group["groups"] = groups
    return group


class D3JSWriter:
    """D3.js JSON, or a self-contained HTML page when ``htmlPage`` is set."""

    def write(self, stream: TextIO, graph: DependencyGraph, config: FormatConfig) -> None:
        data = to_d3(
            graph,
            group_by_scope=config.get_bool("groupByScope", True),
            group_by_type=config.get_bool("groupByType", True),
        )

        if config.get_bool("htmlPage", False):
            stream.write(render_html(data, title=config.get_str("title", "depmap")))
            return

        pretty = config.get_bool("pretty", True)
        json.dump(data, stream, indent=2 if pretty else None)
        stream.write("\n")


def render_html(data: dict, *, title: str = "depmap") -> str:
    """Embed *data* in the interactive HTML page template."""
    template = Template(_TEMPLATE_PATH.read_text(encoding="utf-8"))
    # Keep "</script>" inside string values from closing the data block.
    data_json = json.dumps(data).replace("</", "<\\/")
    return template.safe_substitute(DATA_JSON=data_json, TITLE=_escape(title))


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
