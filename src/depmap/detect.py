"""Auto-detect project type and return the appropriate semantic model."""

from __future__ import annotations

import logging
from pathlib import Path

from depmap.config import ProjectConfig
from depmap.semantic.base import SemanticModel
from depmap.semantic.java import is_java_project
from depmap.semantic.python import is_python_project

logger = logging.getLogger(__name__)


def detect_model(project_dir: Path, config: ProjectConfig) -> SemanticModel | None:
    """Return a semantic model for *project_dir*, or None if its type is unknown."""
    if is_python_project(project_dir):
        from depmap.semantic.python.model import PythonSemanticModel

        return PythonSemanticModel(
            project_dir,
            exclude=config.exclude,
            include_tests=config.include_tests,
        )

    if is_java_project(project_dir):
        try:
            from depmap.semantic.java.model import JavaSemanticModel
        except ImportError:
            logger.warning(
                "javalang not installed, cannot analyze Java sources. "
                "Install with: pip install javalang"
            )
            return None

        return JavaSemanticModel(project_dir, exclude=config.exclude)

    return None
