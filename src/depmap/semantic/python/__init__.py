"""Python semantic model: shared helpers."""

from __future__ import annotations

from pathlib import Path

_PROJECT_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg", "pixi.toml")


def is_python_project(project_dir: Path) -> bool:
    """Return True if *project_dir* contains a Python project indicator."""
    return any((project_dir / marker).exists() for marker in _PROJECT_MARKERS)


def find_source_root(project_dir: Path) -> Path:
    """Return the directory that module names are relative to.

    Projects using the src-layout keep their packages under ``src/``; every
    other project is treated as a flat layout rooted at *project_dir*.
    """
    src = project_dir / "src"
    if src.is_dir() and any(src.rglob("*.py")):
        return src
    return project_dir


def module_name_for(path: Path, source_root: Path) -> tuple[str, bool]:
    """Return the dotted module name of *path* and whether it is a package."""
    relative = path.relative_to(source_root).with_suffix("")
    parts = list(relative.parts)
    is_package = parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package
