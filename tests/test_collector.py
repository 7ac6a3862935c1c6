import logging

from depmap.collector import DefinitionCollector, display_name, node_id
from depmap.model import DependencyGraph, NodeKind, Receiver

from conftest import make_decl


def test_functions_and_types_keep_their_name():
    graph = DependencyGraph()
    collector = DefinitionCollector(graph)
    collector.collect(
        [
            make_decl("f", scope="app", name="Run"),
            make_decl("t", scope="app", name="Config", kind=NodeKind.TYPE),
        ]
    )
    assert set(graph.nodes) == {"app::Run", "app::Config"}
    assert graph.nodes["app::Config"].kind is NodeKind.TYPE
    assert graph.nodes["app::Run"].file == "mod.py"


def test_methods_are_qualified_by_receiver():
    graph = DependencyGraph()
    collector = DefinitionCollector(graph)
    collector.collect(
        [
            make_decl(
                "ptr",
                scope="srv",
                name="Start",
                kind=NodeKind.METHOD,
                receiver=Receiver("Server", by_reference=True),
            ),
            make_decl(
                "val",
                scope="srv",
                name="Start",
                kind=NodeKind.METHOD,
                receiver=Receiver("Client"),
            ),
        ]
    )
    assert set(graph.nodes) == {"srv::(*Server).Start", "srv::Client.Start"}
    node = graph.nodes["srv::(*Server).Start"]
    assert node.receiver == Receiver("Server", by_reference=True)
    assert node.name == "(*Server).Start"


def test_out_of_project_declarations_are_dropped(caplog):
    graph = DependencyGraph()
    collector = DefinitionCollector(graph)
    with caplog.at_level(logging.INFO, logger="depmap.collector"):
        collector.collect(
            [
                make_decl("mine", name="mine"),
                make_decl("theirs", scope="vendor/lib", name="theirs", in_project=False),
            ]
        )
    assert list(graph.nodes) == ["pkg::mine"]
    assert "theirs" not in collector.lookup
    assert "Found 1 definitions inside the project." in caplog.text


def test_id_collision_keeps_last_declaration():
    graph = DependencyGraph()
    collector = DefinitionCollector(graph)
    collector.collect(
        [
            make_decl("linux", name="open", line=10),
            make_decl("windows", name="open", line=20),
        ]
    )
    assert len(graph.nodes) == 1
    assert graph.nodes["pkg::open"].line == 20
    # Both identities still map to a node carrying the shared id.
    assert collector.lookup["linux"].id == collector.lookup["windows"].id == "pkg::open"
    assert len(collector.definitions) == 2


def test_helpers():
    assert node_id("a/b", "f") == "a/b::f"
    decl = make_decl("k", name="m", kind=NodeKind.METHOD, receiver=Receiver("T"))
    assert display_name(decl) == "T.m"
