"""Symbol-level dependency graphs with connected-component ranking."""

from depmap.builder import build_graph
from depmap.model import Component, DependencyGraph, Node, NodeKind, Receiver

__version__ = "0.1.0"

__all__ = [
    "Component",
    "DependencyGraph",
    "Node",
    "NodeKind",
    "Receiver",
    "build_graph",
]
