"""Project configuration and formatter options."""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration could not be parsed."""


@dataclass
class ProjectConfig:
    """Settings read from ``.depmap.toml`` or ``[tool.depmap]``."""

    exclude: list[str] | None = None
    include_tests: bool = False
    format: str | None = None
    components: bool = False
    formatter: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ProjectConfig:
        exclude = data.get("exclude")
        if exclude is not None and not isinstance(exclude, list):
            raise ConfigError("'exclude' must be a list of directory names")
        formatter = data.get("formatter", {})
        if not isinstance(formatter, dict):
            raise ConfigError("'formatter' must be a table")
        return cls(
            exclude=exclude,
            include_tests=bool(data.get("include_tests", False)),
            format=data.get("format"),
            components=bool(data.get("components", False)),
            formatter=dict(formatter),
        )


def _read_toml(path: Path) -> dict | None:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("Could not read %s: %s", path, e)
        return None


def load_project_config(project_dir: Path) -> ProjectConfig:
    """Read depmap settings from .depmap.toml or pyproject.toml."""
    # Try .depmap.toml first
    depmap_toml = project_dir / ".depmap.toml"
    if depmap_toml.exists():
        data = _read_toml(depmap_toml)
        if data is not None and "depmap" in data:
            return ProjectConfig.from_mapping(data["depmap"])

    # Fall back to [tool.depmap] in pyproject.toml
    pyproject = project_dir / "pyproject.toml"
    if pyproject.exists():
        data = _read_toml(pyproject)
        if data is not None:
            section = data.get("tool", {}).get("depmap")
            if section is not None:
                return ProjectConfig.from_mapping(section)

    return ProjectConfig()


class FormatConfig(dict):
    """Formatter options with typed, defaulting accessors."""

    def get_str(self, key: str, default: str) -> str:
        value = self.get(key)
        return value if isinstance(value, str) else default

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        # bool is an int subclass; JSON numbers may arrive as floats.
        if isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        return default

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key)
        return value if isinstance(value, bool) else default

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            return float(value)
        return default

    def has(self, key: str) -> bool:
        return key in self


def parse_format_config(text: str | None) -> FormatConfig:
    """Parse a JSON object of formatter options, e.g. ``{"pretty": false}``."""
    if not text:
        return FormatConfig()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid formatter config JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("formatter config must be a JSON object")
    return FormatConfig(data)
