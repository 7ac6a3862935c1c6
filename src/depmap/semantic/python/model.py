"""Resolve Python definitions and name uses via the standard ``ast`` module."""

from __future__ import annotations

import ast
import logging
import warnings
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from depmap.model import NodeKind, Receiver
from depmap.semantic.base import Declaration, LoadError
from depmap.semantic.python import find_source_root, module_name_for

logger = logging.getLogger(__name__)

_SKIP_DIRS = {
    ".git",
    ".github",
    ".tox",
    ".nox",
    ".venv",
    "venv",
    ".eggs",
    ".mypy_cache",
    ".pytest_cache",
    "__pycache__",
    "node_modules",
    "site-packages",
    "build",
    "dist",
    "docs",
    "doc",
}

_TEST_DIRS = {"tests", "test"}

_SKIP_FILES = {"setup.py", "conftest.py", "noxfile.py"}

DEFAULT_EXCLUDE = ("_vendor", "vendor", "third_party", "extern")

# Bound on chained re-exports followed while resolving a name.
_MAX_IMPORT_DEPTH = 16

_FunctionNode = (ast.FunctionDef, ast.AsyncFunctionDef)

Key = tuple[str, str]


@dataclass
class _Module:
    name: str
    path: Path
    tree: ast.Module
    is_package: bool
    in_project: bool
    definitions: dict[str, ast.AST] = field(default_factory=dict)
    methods: dict[str, dict[str, ast.AST]] = field(default_factory=dict)
    bases: dict[str, list[ast.expr]] = field(default_factory=dict)
    imports: dict[str, str] = field(default_factory=dict)
    star_imports: list[str] = field(default_factory=list)

    @property
    def package(self) -> str:
        if self.is_package:
            return self.name
        return self.name.rpartition(".")[0]


@dataclass(frozen=True)
class Occurrence:
    """A ``Name`` or ``Attribute`` expression inside a definition."""

    module: str
    expr: ast.expr
    owner: str | None = None
    receiver_param: str | None = None
    local_names: frozenset[str] = frozenset()


# A resolved reference is either a module or a declaration key.
@dataclass(frozen=True)
class _Ref:
    module: str
    qualname: str | None = None

    @property
    def is_module(self) -> bool:
        return self.qualname is None


class PythonSemanticModel:
    """Semantic model for a Python project's source tree."""

    def __init__(
        self,
        project_dir: Path,
        *,
        exclude: Iterable[str] | None = None,
        include_tests: bool = False,
    ):
        self.project_dir = project_dir
        self.source_root = find_source_root(project_dir)
        self.exclude = set(DEFAULT_EXCLUDE if exclude is None else exclude)
        self.include_tests = include_tests
        self._modules: dict[str, _Module] = {}
        self._bodies: dict[Key, list[tuple[_Module, ast.AST, str | None]]] = {}

    # -- loading ----------------------------------------------------------

    def _source_files(self) -> Iterator[Path]:
        for path in sorted(self.source_root.rglob("*.py")):
            relative = path.relative_to(self.source_root)
            dirs = relative.parts[:-1]
            if any(d in _SKIP_DIRS or d.startswith(".") for d in dirs):
                continue
            if not self.include_tests and (
                any(d in _TEST_DIRS for d in dirs) or path.name.startswith("test_")
            ):
                continue
            if path.name in _SKIP_FILES and not dirs:
                continue
            yield path

    def load(self) -> None:
        """Parse every source file; raise LoadError listing all failures."""
        problems: list[tuple[Path, str]] = []
        for path in self._source_files():
            name, is_package = module_name_for(path, self.source_root)
            if not name:
                continue
            try:
                with warnings.catch_warnings():
                    warnings.simplefilter("ignore", SyntaxWarning)
                    tree = ast.parse(path.read_text(encoding="utf-8"), str(path))
            except SyntaxError as e:
                problems.append((path, f"line {e.lineno}: {e.msg}"))
                continue
            except (OSError, UnicodeDecodeError) as e:
                problems.append((path, str(e)))
                continue

            relative_dirs = path.relative_to(self.source_root).parts[:-1]
            module = _Module(
                name=name,
                path=path,
                tree=tree,
                is_package=is_package,
                in_project=not any(d in self.exclude for d in relative_dirs),
            )
            _index_module(module)
            self._modules[name] = module

        if problems:
            raise LoadError(problems)
        logger.debug("Loaded %d Python modules from %s", len(self._modules), self.source_root)

    # -- declarations -----------------------------------------------------

    def declarations(self) -> Iterator[Declaration]:
        """Yield one declaration per qualified name.

        Redefinitions of the same name, such as a ``@property`` getter and its
        setter, are folded into the first declaration and their bodies are
        scanned together.
        """
        self._bodies = {}
        for module in self._modules.values():
            for decl in self._module_declarations(module):
                if decl is not None:
                    yield decl

    def _module_declarations(self, module: _Module) -> Iterator[Declaration | None]:
        for stmt in module.tree.body:
            if isinstance(stmt, _FunctionNode):
                yield self._declare(module, stmt, stmt.name, NodeKind.FUNCTION)
            elif isinstance(stmt, ast.ClassDef):
                yield self._declare(module, stmt, stmt.name, NodeKind.TYPE)
                for item in stmt.body:
                    if isinstance(item, _FunctionNode):
                        receiver = Receiver(
                            type_name=stmt.name,
                            by_reference=_binding(item) == "instance",
                        )
                        yield self._declare(
                            module,
                            item,
                            item.name,
                            NodeKind.METHOD,
                            owner=stmt.name,
                            receiver=receiver,
                        )

    def _declare(
        self,
        module: _Module,
        node: ast.AST,
        name: str,
        kind: NodeKind,
        *,
        owner: str | None = None,
        receiver: Receiver | None = None,
    ) -> Declaration | None:
        """Register *node*'s body; return None if its name was already declared."""
        qualname = f"{owner}.{name}" if owner else name
        key = (module.name, qualname)
        bodies = self._bodies.setdefault(key, [])
        bodies.append((module, node, owner))
        if len(bodies) > 1:
            return None
        return Declaration(
            key=key,
            scope=module.name,
            name=name,
            kind=kind,
            path=module.path,
            line=node.lineno,
            signature=_signature(node),
            receiver=receiver,
            in_project=module.in_project,
        )

    # -- occurrences ------------------------------------------------------

    def occurrences(self, decl: Declaration) -> Iterator[Occurrence]:
        for module, node, owner in self._bodies.get(decl.key, ()):
            if isinstance(node, _FunctionNode):
                yield from self._body_occurrences(module, node, owner)

    def _body_occurrences(
        self, module: _Module, node: ast.AST, owner: str | None
    ) -> Iterator[Occurrence]:
        receiver_param = None
        if owner is not None and _binding(node) != "static":
            positional = node.args.posonlyargs + node.args.args
            if positional:
                receiver_param = positional[0].arg

        local_names = frozenset(_local_names(node))
        roots: list[ast.AST] = [*node.decorator_list, node.args, *node.body]
        if node.returns is not None:
            roots.append(node.returns)

        for root in roots:
            for sub in ast.walk(root):
                if isinstance(sub, (ast.Name, ast.Attribute)):
                    yield Occurrence(
                        module=module.name,
                        expr=sub,
                        owner=owner,
                        receiver_param=receiver_param,
                        local_names=local_names,
                    )

    # -- resolution -------------------------------------------------------

    def resolve(self, occurrence: Occurrence) -> Key | None:
        chain = _attribute_chain(occurrence.expr)
        if chain is None:
            return None
        root, attrs = chain[0], chain[1:]

        if root == occurrence.receiver_param and occurrence.owner is not None:
            if not attrs:
                return None
            ref: _Ref | None = _Ref(occurrence.module, occurrence.owner)
        elif root in occurrence.local_names:
            return None
        else:
            ref = self._lookup_global(occurrence.module, root, 0)

        for attr in attrs:
            if ref is None:
                return None
            ref = self._member(ref, attr, 0)

        if ref is None or ref.is_module:
            return None
        return (ref.module, ref.qualname)

    def _lookup_global(self, module_name: str, name: str, depth: int) -> _Ref | None:
        module = self._modules.get(module_name)
        if module is None or depth > _MAX_IMPORT_DEPTH:
            return None
        if name in module.definitions:
            return _Ref(module.name, name)
        target = module.imports.get(name)
        if target is not None:
            return self._lookup_absolute(target, depth + 1)
        for star in module.star_imports:
            ref = self._lookup_global(star, name, depth + 1)
            if ref is not None:
                return ref
        return None

    def _lookup_absolute(self, dotted: str, depth: int) -> _Ref | None:
        if dotted in self._modules:
            return _Ref(dotted)
        parent, _, attr = dotted.rpartition(".")
        if parent in self._modules:
            return self._lookup_global(parent, attr, depth)
        return None

    def _member(self, ref: _Ref, attr: str, depth: int) -> _Ref | None:
        if ref.is_module:
            submodule = f"{ref.module}.{attr}"
            if submodule in self._modules:
                return _Ref(submodule)
            return self._lookup_global(ref.module, attr, depth)
        module = self._modules[ref.module]
        if ref.qualname in module.methods:
            return self._class_member(module, ref.qualname, attr, set())
        return None

    def _class_member(
        self, module: _Module, class_name: str, attr: str, seen: set[tuple[str, str]]
    ) -> _Ref | None:
        """Find method *attr* on *class_name* or one of its in-project bases."""
        seen.add((module.name, class_name))
        if attr in module.methods[class_name]:
            return _Ref(module.name, f"{class_name}.{attr}")
        for base in module.bases[class_name]:
            chain = _attribute_chain(base)
            if chain is None:
                continue
            ref = self._lookup_global(module.name, chain[0], 0)
            for part in chain[1:]:
                if ref is None:
                    break
                ref = self._member(ref, part, 0)
            if ref is None or ref.is_module:
                continue
            base_module = self._modules[ref.module]
            if ref.qualname not in base_module.methods:
                continue
            if (base_module.name, ref.qualname) in seen:
                continue
            found = self._class_member(base_module, ref.qualname, attr, seen)
            if found is not None:
                return found
        return None


def _index_module(module: _Module) -> None:
    """Record top-level definitions, class methods and imports of *module*."""
    for stmt in module.tree.body:
        if isinstance(stmt, _FunctionNode):
            module.definitions[stmt.name] = stmt
        elif isinstance(stmt, ast.ClassDef):
            module.definitions[stmt.name] = stmt
            module.bases[stmt.name] = list(stmt.bases)
            module.methods[stmt.name] = {
                item.name: item for item in stmt.body if isinstance(item, _FunctionNode)
            }

    # Imports anywhere in the module, including lazy imports inside functions.
    for node in ast.walk(module.tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    module.imports[alias.asname] = alias.name
                else:
                    top = alias.name.partition(".")[0]
                    module.imports.setdefault(top, top)
        elif isinstance(node, ast.ImportFrom):
            source = _absolute_import(module, node)
            if source is None:
                continue
            for alias in node.names:
                if alias.name == "*":
                    module.star_imports.append(source)
                else:
                    module.imports[alias.asname or alias.name] = f"{source}.{alias.name}"


def _absolute_import(module: _Module, node: ast.ImportFrom) -> str | None:
    if node.level == 0:
        return node.module
    parts = module.package.split(".") if module.package else []
    up = node.level - 1
    if up > len(parts):
        return None
    base = parts[: len(parts) - up]
    if node.module:
        base.append(node.module)
    return ".".join(base) or None


def _binding(func: ast.AST) -> str:
    """Return "static", "class" or "instance" for a method definition."""
    for decorator in func.decorator_list:
        name = decorator.id if isinstance(decorator, ast.Name) else None
        if name == "staticmethod":
            return "static"
        if name == "classmethod":
            return "class"
    return "instance"


def _local_names(func: ast.AST) -> set[str]:
    """Names bound inside *func*: parameters, assignments, nested defs."""
    names: set[str] = set()
    declared_global: set[str] = set()
    for node in ast.walk(func):
        if node is func:
            continue
        if isinstance(node, ast.arg):
            names.add(node.arg)
        elif isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Store, ast.Del)):
            names.add(node.id)
        elif isinstance(node, (*_FunctionNode, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.ExceptHandler) and node.name:
            names.add(node.name)
        elif isinstance(node, (ast.Global, ast.Nonlocal)):
            declared_global.update(node.names)
    return names - declared_global


def _attribute_chain(expr: ast.expr) -> list[str] | None:
    """Flatten ``a.b.c`` into ``["a", "b", "c"]``; None for non-name roots."""
    attrs: list[str] = []
    while isinstance(expr, ast.Attribute):
        attrs.append(expr.attr)
        expr = expr.value
    if not isinstance(expr, ast.Name):
        return None
    attrs.append(expr.id)
    attrs.reverse()
    return attrs


def _signature(node: ast.AST) -> str:
    if isinstance(node, ast.ClassDef):
        bases = [ast.unparse(b) for b in node.bases]
        bases += [ast.unparse(k) for k in node.keywords]
        return f"class {node.name}({', '.join(bases)})" if bases else f"class {node.name}"
    prefix = "async def" if isinstance(node, ast.AsyncFunctionDef) else "def"
    sig = f"{prefix} {node.name}({ast.unparse(node.args)})"
    if node.returns is not None:
        sig += f" -> {ast.unparse(node.returns)}"
    return sig
