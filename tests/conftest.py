from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from depmap.model import DependencyGraph, Node, NodeKind
from depmap.semantic.base import Declaration


def make_node(node_id: str, kind: NodeKind = NodeKind.FUNCTION) -> Node:
    return Node(
        id=node_id,
        name=node_id,
        kind=kind,
        scope="test",
        file="test.py",
        line=1,
        signature=f"def {node_id}()",
    )


def make_graph(node_ids, edges=None) -> DependencyGraph:
    graph = DependencyGraph()
    for node_id in node_ids:
        graph.put_node(make_node(node_id))
    for source, targets in (edges or {}).items():
        graph.add_edges(source, list(targets))
    return graph


def make_decl(key, scope="pkg", name=None, kind=NodeKind.FUNCTION, **kwargs) -> Declaration:
    return Declaration(
        key=key,
        scope=scope,
        name=name or str(key),
        kind=kind,
        path=Path(f"/src/{scope}/mod.py"),
        line=kwargs.pop("line", 1),
        signature=kwargs.pop("signature", ""),
        **kwargs,
    )


class FakeModel:
    """Semantic model whose occurrences are the keys they resolve to."""

    def __init__(self, declarations, uses=None):
        self._declarations = list(declarations)
        self._uses = uses or {}

    def load(self) -> None:
        pass

    def declarations(self):
        return iter(self._declarations)

    def occurrences(self, decl):
        return iter(self._uses.get(decl.key, []))

    def resolve(self, occurrence):
        return occurrence


def write_files(root: Path, files: dict[str, str]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"))
    return root


PYTHON_PROJECT = {
    "pyproject.toml": """
        [project]
        name = "pkg"
    """,
    "src/pkg/__init__.py": """
        from .core import Engine

        __all__ = ["Engine"]
    """,
    "src/pkg/core.py": """
        import os

        from pkg import util
        from pkg.util import helper as h


        class Base:
            def setup(self):
                return 1


        class Engine(Base):
            def __init__(self, name: str):
                self.name = name

            def run(self) -> "Engine":
                self.setup()
                self.step()
                return h(self.name)

            def step(self):
                util.format_name(os.getcwd())

            @staticmethod
            def build():
                return Engine("x")


        def main():
            engine = Engine.build()
            engine.run()
            value = len([])
            return value
    """,
    "src/pkg/util.py": """
        from pkg._vendor.lib import vendored


        def helper(x):
            return format_name(x)


        def format_name(x):
            return x.upper()


        def call_vendor():
            return vendored()
    """,
    "src/pkg/app.py": """
        from pkg import Engine


        def start():
            return Engine("a")
    """,
    "src/pkg/_vendor/__init__.py": "",
    "src/pkg/_vendor/lib.py": """
        def vendored():
            return None
    """,
    "src/pkg/test_helpers.py": """
        def fixture_helper():
            return None
    """,
}


@pytest.fixture
def python_project(tmp_path: Path) -> Path:
    return write_files(tmp_path, PYTHON_PROJECT)
