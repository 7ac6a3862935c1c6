"""Write a DependencyGraph as plain JSON."""

from __future__ import annotations

import json
from typing import TextIO

from depmap.config import FormatConfig
from depmap.model import DependencyGraph


class JSONWriter:
    """Nodes, edges and (when computed) components, pretty-printed by default."""

    def __init__(self, *, pretty: bool | None = None):
        self._pretty = pretty

    def write(self, stream: TextIO, graph: DependencyGraph, config: FormatConfig) -> None:
        pretty = self._pretty if self._pretty is not None else config.get_bool("pretty", True)
        json.dump(graph.to_dict(), stream, indent=2 if pretty else None)
        stream.write("\n")
