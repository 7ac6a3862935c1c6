from depmap.model import DependencyGraph, NodeKind, Receiver

from conftest import make_graph, make_node


def test_new_graph_is_empty():
    graph = DependencyGraph()
    assert graph.nodes == {}
    assert graph.edges == {}
    assert graph.components == []
    assert graph.count_edges() == 0


def test_put_node_overwrites_by_id():
    graph = DependencyGraph()
    first = make_node("pkg::f")
    second = make_node("pkg::f")
    second.line = 42
    graph.put_node(first)
    graph.put_node(second)
    assert len(graph.nodes) == 1
    assert graph.nodes["pkg::f"].line == 42


def test_count_edges_sums_target_lists():
    graph = make_graph("ABCD", {"A": ["B", "C"], "B": ["C"], "D": ["A", "B", "C"]})
    assert graph.count_edges() == 6
    assert graph.count_edges() == 6


def test_add_edges_appends_and_ignores_empty():
    graph = make_graph("ABC")
    graph.add_edges("A", ["B"])
    graph.add_edges("A", ["C"])
    graph.add_edges("B", [])
    assert graph.edges == {"A": ["B", "C"]}


def test_receiver_display_names():
    assert Receiver("Server", by_reference=True).qualify("Start") == "(*Server).Start"
    assert Receiver("Server").qualify("Addr") == "Server.Addr"


def test_node_to_dict_contract():
    node = make_node("pkg::(*T).m", kind=NodeKind.METHOD)
    node.receiver = Receiver("T", by_reference=True)
    d = node.to_dict()
    assert d["kind"] == "method"
    assert d["componentID"] == 0
    assert d["componentScore"] == 0.0
    assert d["receiver"] == {"type": "T", "byReference": True}
    assert {"id", "name", "scope", "file", "line", "signature"} <= d.keys()


def test_graph_to_dict_omits_components_until_computed():
    graph = make_graph("AB", {"A": ["B"]})
    assert "components" not in graph.to_dict()
    graph.compute_components()
    data = graph.to_dict()
    (component,) = data["components"]
    assert component["id"] == 0
    assert component["memberIDs"] == ["A", "B"]
    assert component["edgeCount"] == 1
    assert component["score"] > 0
    assert data["edges"] == {"A": ["B"]}
