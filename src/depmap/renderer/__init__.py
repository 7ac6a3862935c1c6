"""Output writers for dependency graphs."""

from __future__ import annotations

from typing import Protocol, TextIO

from depmap.config import FormatConfig
from depmap.model import DependencyGraph


class Writer(Protocol):
    """Protocol for graph output formats."""

    def write(self, stream: TextIO, graph: DependencyGraph, config: FormatConfig) -> None:
        """Serialize *graph* to *stream*."""
        ...


def get_writer(name: str) -> Writer:
    """Return the writer registered under *name*; unknown names get pretty JSON."""
    from depmap.renderer.d3js import D3JSWriter
    from depmap.renderer.json_writer import JSONWriter

    if name in ("d3js", "d3js-json"):
        return D3JSWriter()
    if name == "minify-json":
        return JSONWriter(pretty=False)
    return JSONWriter()


FORMATS = ("json", "pretty-json", "minify-json", "d3js", "d3js-json")
