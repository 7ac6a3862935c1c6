"""Java semantic model: shared helpers."""

from __future__ import annotations

from pathlib import Path


def is_java_project(project_dir: Path) -> bool:
    """Return True for Maven and Gradle projects."""
    return (
        (project_dir / "pom.xml").exists()
        or (project_dir / "build.gradle.kts").exists()
        or (project_dir / "build.gradle").exists()
    )


def find_source_root(project_dir: Path) -> Path:
    """Find the Java source root directory."""
    src_main_java = project_dir / "src" / "main" / "java"
    if src_main_java.is_dir():
        return src_main_java
    return project_dir
