"""Semantic model protocol: all source-language models conform to this interface."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from depmap.model import NodeKind, Receiver

DeclKind = NodeKind


@dataclass(frozen=True)
class Declaration:
    """A declared function, method, or type as reported by a semantic model."""

    key: Hashable
    scope: str
    name: str
    kind: DeclKind
    path: Path
    line: int
    signature: str
    receiver: Receiver | None = None
    in_project: bool = True

    @property
    def has_body(self) -> bool:
        return self.kind is not DeclKind.TYPE


class LoadError(Exception):
    """One or more source files could not be loaded into the semantic model."""

    def __init__(self, problems: list[tuple[Path, str]]):
        self.problems = problems
        lines = [f"{path}: {message}" for path, message in problems]
        super().__init__(
            f"{len(problems)} file(s) failed to load:\n" + "\n".join(lines)
        )


class SemanticModel(Protocol):
    """Protocol for the upstream collaborator that knows declarations and uses."""

    def load(self) -> None:
        """Parse the project; raise LoadError if any file fails."""
        ...

    def declarations(self) -> Iterable[Declaration]:
        """Yield every declaration the model knows, in or out of the project."""
        ...

    def occurrences(self, decl: Declaration) -> Iterable[Any]:
        """Yield the identifier occurrences in *decl*'s signature and body."""
        ...

    def resolve(self, occurrence: Any) -> Hashable | None:
        """Return the key of the declaration *occurrence* denotes, or None."""
        ...
