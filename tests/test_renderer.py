import io
import json

from depmap.config import FormatConfig
from depmap.model import NodeKind, Receiver
from depmap.renderer import get_writer
from depmap.renderer.d3js import D3JSWriter, to_d3
from depmap.renderer.json_writer import JSONWriter

from conftest import make_graph, make_node


def _sample_graph():
    graph = make_graph(["app::main"], {})
    for method, receiver in (("(*Server).Start", "Server"), ("(*Server).Stop", "Server")):
        node = make_node(f"app::{method}", kind=NodeKind.METHOD)
        node.scope = "app"
        node.receiver = Receiver(receiver, by_reference=True)
        graph.put_node(node)
    server = make_node("app::Server", kind=NodeKind.TYPE)
    server.scope = "app"
    graph.put_node(server)
    graph.nodes["app::main"].scope = "app"
    graph.add_edges("app::main", ["app::(*Server).Start", "app::Server"])
    graph.add_edges("app::(*Server).Start", ["app::(*Server).Stop"])
    return graph


def _write(writer, graph, **options):
    stream = io.StringIO()
    writer.write(stream, graph, FormatConfig(options))
    return stream.getvalue()


def test_get_writer():
    assert isinstance(get_writer("json"), JSONWriter)
    assert isinstance(get_writer("d3js"), D3JSWriter)
    assert isinstance(get_writer("d3js-json"), D3JSWriter)
    assert isinstance(get_writer("no-such-format"), JSONWriter)


def test_json_writer_pretty_and_minified():
    graph = _sample_graph()
    pretty = _write(JSONWriter(), graph)
    minified = _write(get_writer("minify-json"), graph, pretty=True)

    assert "\n  " in pretty
    assert minified.count("\n") == 1
    assert json.loads(pretty) == json.loads(minified)
    assert _write(JSONWriter(), graph, pretty=False).count("\n") == 1


def test_json_writer_contract():
    graph = _sample_graph()
    graph.compute_components()
    data = json.loads(_write(JSONWriter(), graph))

    assert set(data) == {"nodes", "edges", "components"}
    assert data["nodes"]["app::Server"]["kind"] == "type"
    assert data["edges"]["app::main"] == ["app::(*Server).Start", "app::Server"]
    (component,) = data["components"]
    assert component["edgeCount"] == 3
    assert len(component["memberIDs"]) == 4


def test_d3_nodes_and_links():
    data = to_d3(_sample_graph(), group_by_scope=False)

    assert [n["id"] for n in data["nodes"]] == sorted(n["id"] for n in data["nodes"])
    groups_by_kind = {n["kind"]: n["group"] for n in data["nodes"]}
    assert groups_by_kind == {"function": 1, "method": 2, "type": 3}
    assert {"source": "app::main", "target": "app::Server", "value": 1} in data["links"]
    assert len(data["links"]) == 3
    assert "groups" not in data
    assert "component" not in data["nodes"][0]


def test_d3_groups_use_structured_receivers():
    data = to_d3(_sample_graph())
    groups = data["groups"]
    index = {n["id"]: i for i, n in enumerate(data["nodes"])}

    type_group, scope_group = groups
    assert type_group["id"] == "app::Server"
    assert type_group["level"] == "type"
    assert sorted(type_group["leaves"]) == sorted(
        [index["app::(*Server).Start"], index["app::(*Server).Stop"]]
    )
    assert scope_group["level"] == "scope"
    assert scope_group["groups"] == [0]
    assert sorted(scope_group["leaves"]) == sorted([index["app::main"], index["app::Server"]])


def test_d3_without_type_groups():
    data = to_d3(_sample_graph(), group_by_type=False)
    (scope_group,) = data["groups"]
    assert len(scope_group["leaves"]) == 4
    assert "groups" not in scope_group


def test_d3_html_page():
    html = _write(D3JSWriter(), _sample_graph(), htmlPage=True, title="demo")
    assert html.startswith("<!DOCTYPE html>")
    assert "$DATA_JSON" not in html
    assert '"app::main"' in html
    assert "<title>demo</title>" in html
