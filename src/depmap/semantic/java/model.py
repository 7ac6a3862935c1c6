"""Resolve Java types, methods and their uses via javalang."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import javalang

from depmap.model import NodeKind, Receiver
from depmap.semantic.base import Declaration, LoadError
from depmap.semantic.java import find_source_root

logger = logging.getLogger(__name__)

# Files to skip when walking Java sources.
_SKIP_FILES = {"package-info.java", "module-info.java"}

_SKIP_DIRS = {".git", ".gradle", ".idea", "build", "target", "node_modules", "test"}

DEFAULT_EXCLUDE = ("vendor", "third_party", "generated")

_TYPE_DECLS = (
    javalang.tree.ClassDeclaration,
    javalang.tree.InterfaceDeclaration,
    javalang.tree.EnumDeclaration,
)

_METHOD_DECLS = (
    javalang.tree.MethodDeclaration,
    javalang.tree.ConstructorDeclaration,
)

_TYPE_KEYWORD = {
    javalang.tree.ClassDeclaration: "class",
    javalang.tree.InterfaceDeclaration: "interface",
    javalang.tree.EnumDeclaration: "enum",
}


@dataclass
class _Unit:
    """One parsed compilation unit."""

    path: Path
    package: str
    tree: object
    in_project: bool
    single_imports: dict[str, str] = field(default_factory=dict)
    wildcard_imports: list[str] = field(default_factory=list)


@dataclass
class _TypeInfo:
    unit: _Unit
    name: str
    node: object
    fields: dict[str, str] = field(default_factory=dict)
    methods: dict[str, list[tuple[tuple, int]]] = field(
        default_factory=lambda: defaultdict(list)
    )


@dataclass(frozen=True)
class Occurrence:
    """A method call, type reference or object creation inside a method."""

    owner: tuple[str, str]
    node: object
    variables: dict = field(default_factory=dict, hash=False, compare=False)
    implicit_this: bool = False


def _line(node) -> int:
    position = getattr(node, "position", None)
    return position.line if position else 0


def _members(type_node) -> list:
    body = type_node.body
    if isinstance(body, javalang.tree.EnumBody):
        return list(body.declarations or [])
    return list(body or [])


def _type_name(type_node) -> str | None:
    """Return the dotted name of a javalang type, e.g. ``java.util.List``."""
    if type_node is None:
        return None
    parts = []
    while type_node is not None:
        parts.append(type_node.name)
        type_node = getattr(type_node, "sub_type", None)
    return ".".join(parts)


def _format_type(type_node) -> str:
    if type_node is None:
        return "void"
    name = _type_name(type_node) or "?"
    if type_node.dimensions:
        name += "[]" * len(type_node.dimensions)
    return name


def _param_types(method) -> tuple[str, ...]:
    types = []
    for param in method.parameters or []:
        text = _format_type(param.type)
        if getattr(param, "varargs", False):
            text += "..."
        types.append(text)
    return tuple(types)


class JavaSemanticModel:
    """Semantic model for a Java project's source tree."""

    def __init__(self, project_dir: Path, *, exclude: Iterable[str] | None = None):
        self.project_dir = project_dir
        self.source_root = find_source_root(project_dir)
        self.exclude = set(DEFAULT_EXCLUDE if exclude is None else exclude)
        self._units: list[_Unit] = []
        self._types: dict[tuple[str, str], _TypeInfo] = {}
        self._bodies: dict[tuple, tuple[_TypeInfo, object]] = {}

    def _source_files(self) -> Iterator[Path]:
        for path in sorted(self.source_root.rglob("*.java")):
            if path.name in _SKIP_FILES:
                continue
            dirs = path.relative_to(self.source_root).parts[:-1]
            if any(d in _SKIP_DIRS or d.startswith(".") for d in dirs):
                continue
            yield path

    def load(self) -> None:
        """Parse every source file; raise LoadError listing all failures."""
        problems: list[tuple[Path, str]] = []
        for path in self._source_files():
            try:
                tree = javalang.parse.parse(path.read_text(encoding="utf-8"))
            except javalang.parser.JavaSyntaxError as e:
                problems.append((path, e.description or "syntax error"))
                continue
            except javalang.tokenizer.LexerError as e:
                problems.append((path, str(e) or "lexer error"))
                continue
            except (OSError, UnicodeDecodeError) as e:
                problems.append((path, str(e)))
                continue

            dirs = path.relative_to(self.source_root).parts[:-1]
            unit = _Unit(
                path=path,
                package=tree.package.name if tree.package else "",
                tree=tree,
                in_project=not any(d in self.exclude for d in dirs),
            )
            for imp in tree.imports or []:
                if imp.static:
                    continue
                if imp.wildcard:
                    unit.wildcard_imports.append(imp.path)
                else:
                    unit.single_imports[imp.path.rpartition(".")[2]] = imp.path
            self._units.append(unit)
            for type_node in tree.types or []:
                if isinstance(type_node, _TYPE_DECLS):
                    self._index_type(unit, type_node, "")

        if problems:
            raise LoadError(problems)
        logger.debug("Loaded %d Java files, %d types", len(self._units), len(self._types))

    def _index_type(self, unit: _Unit, type_node, prefix: str) -> None:
        name = f"{prefix}{type_node.name}"
        info = _TypeInfo(unit=unit, name=name, node=type_node)
        self._types[(unit.package, name)] = info
        for member in _members(type_node):
            if isinstance(member, javalang.tree.FieldDeclaration):
                for declarator in member.declarators:
                    info.fields[declarator.name] = _type_name(member.type)
            elif isinstance(member, _METHOD_DECLS):
                key = ("method", unit.package, name, member.name, _param_types(member))
                info.methods[member.name].append((key, len(member.parameters or [])))
            elif isinstance(member, _TYPE_DECLS):
                self._index_type(unit, member, f"{name}.")

    # -- declarations -----------------------------------------------------

    def declarations(self) -> Iterator[Declaration]:
        for info in self._types.values():
            unit = info.unit
            keyword = _TYPE_KEYWORD.get(type(info.node), "class")
            yield Declaration(
                key=("type", unit.package, info.name),
                scope=unit.package,
                name=info.name,
                kind=NodeKind.TYPE,
                path=unit.path,
                line=_line(info.node),
                signature=f"{keyword} {info.name}",
                in_project=unit.in_project,
            )
            for member in _members(info.node):
                if not isinstance(member, _METHOD_DECLS):
                    continue
                params = _param_types(member)
                key = ("method", unit.package, info.name, member.name, params)
                self._bodies[key] = (info, member)
                if isinstance(member, javalang.tree.MethodDeclaration):
                    signature = f"{_format_type(member.return_type)} {member.name}({', '.join(params)})"
                else:
                    signature = f"{member.name}({', '.join(params)})"
                yield Declaration(
                    key=key,
                    scope=unit.package,
                    name=member.name,
                    kind=NodeKind.METHOD,
                    path=unit.path,
                    line=_line(member),
                    signature=signature,
                    receiver=Receiver(
                        type_name=info.name,
                        by_reference="static" not in (member.modifiers or set()),
                    ),
                    in_project=unit.in_project,
                )

    # -- occurrences ------------------------------------------------------

    def occurrences(self, decl: Declaration) -> Iterator[Occurrence]:
        entry = self._bodies.get(decl.key)
        if entry is None:
            return
        info, method = entry
        owner = (info.unit.package, info.name)

        variables: dict[str, str] = dict(info.fields)
        chained: set[int] = set()
        via_this: set[int] = set()
        nested_types: set[int] = set()
        for _, node in method:
            if isinstance(node, javalang.tree.FormalParameter):
                variables[node.name] = _type_name(node.type)
            elif isinstance(
                node, (javalang.tree.VariableDeclaration, javalang.tree.FieldDeclaration)
            ):
                for declarator in node.declarators:
                    variables[declarator.name] = _type_name(node.type)
            elif isinstance(node, javalang.tree.ReferenceType) and node.sub_type:
                nested_types.add(id(node.sub_type))
            for index, selector in enumerate(getattr(node, "selectors", None) or []):
                if isinstance(selector, javalang.tree.MethodInvocation):
                    if index == 0 and isinstance(node, javalang.tree.This):
                        via_this.add(id(selector))
                    else:
                        chained.add(id(selector))

        for _, node in method:
            if isinstance(node, javalang.tree.MethodInvocation):
                if id(node) in chained:
                    continue
                yield Occurrence(
                    owner=owner,
                    node=node,
                    variables=variables,
                    implicit_this=id(node) in via_this,
                )
            elif isinstance(node, javalang.tree.ReferenceType):
                if id(node) not in nested_types:
                    yield Occurrence(owner=owner, node=node)
            elif isinstance(node, javalang.tree.ClassCreator):
                yield Occurrence(owner=owner, node=node)

    # -- resolution -------------------------------------------------------

    def resolve(self, occurrence: Occurrence) -> tuple | None:
        node = occurrence.node
        owner = self._types.get(occurrence.owner)
        if owner is None:
            return None

        if isinstance(node, javalang.tree.ReferenceType):
            target = self._resolve_type(owner, _type_name(node))
            return ("type", *target) if target else None

        if isinstance(node, javalang.tree.ClassCreator):
            target = self._resolve_type(owner, _type_name(node.type))
            if target is None:
                return None
            simple = target[1].rpartition(".")[2]
            constructor = self._pick_method(target, simple, len(node.arguments or []))
            return constructor or ("type", *target)

        if isinstance(node, javalang.tree.MethodInvocation):
            qualifier = node.qualifier or ""
            if occurrence.implicit_this or not qualifier or qualifier == "this":
                target = occurrence.owner
            else:
                head = qualifier.partition(".")[0]
                if head in occurrence.variables and "." not in qualifier:
                    target = self._resolve_type(owner, occurrence.variables[head])
                else:
                    target = self._resolve_type(owner, qualifier)
            if target is None:
                return None
            return self._pick_method(target, node.member, len(node.arguments or []))

        return None

    def _pick_method(self, type_key: tuple[str, str], name: str, arity: int) -> tuple | None:
        info = self._types.get(type_key)
        if info is None:
            return None
        candidates = info.methods.get(name)
        if not candidates:
            return None
        for key, count in candidates:
            if count == arity:
                return key
        return candidates[0][0]

    def _resolve_type(self, owner: _TypeInfo, name: str | None) -> tuple[str, str] | None:
        """Map a type name as written in *owner*'s file to a known type key."""
        if not name:
            return None
        name = name.split("<", 1)[0]
        unit = owner.unit

        # Nested type of the enclosing type, e.g. ``Inner`` inside ``Outer``.
        outer = owner.name
        while outer:
            candidate = (unit.package, f"{outer}.{name}")
            if candidate in self._types:
                return candidate
            outer = outer.rpartition(".")[0]

        head, _, rest = name.partition(".")
        if head in unit.single_imports:
            package, _, simple = unit.single_imports[head].rpartition(".")
            candidate = (package, f"{simple}.{rest}" if rest else simple)
            if candidate in self._types:
                return candidate

        candidate = (unit.package, name)
        if candidate in self._types:
            return candidate

        for package in unit.wildcard_imports:
            candidate = (package, name)
            if candidate in self._types:
                return candidate

        # Fully qualified name, e.g. ``com.example.Util``.
        parts = name.split(".")
        for i in range(len(parts) - 1, 0, -1):
            candidate = (".".join(parts[:i]), ".".join(parts[i:]))
            if candidate in self._types:
                return candidate
        return None
