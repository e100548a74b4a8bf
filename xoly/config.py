"""
Engine configuration.

Settings come from code (EngineConfig(...)) or from a YAML file, by default
`xoly.yaml`:

    loop_limit: 100000
    max_include_depth: 16
    max_nesting_depth: 128
    template_paths: ["templates", "shared"]
    encoding: utf-8
    cache_templates: true
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "xoly.yaml"

_yaml = YAML(typ="safe")


@dataclass
class EngineConfig:
    """
    Limits and template lookup settings of a TemplateEngine.
    """
    loop_limit: int = 100_000
    max_include_depth: int = 16
    max_nesting_depth: int = 128
    template_paths: List[str] = field(default_factory=lambda: ["."])
    encoding: str = "utf-8"
    cache_templates: bool = True

    def __post_init__(self):
        for name in ("loop_limit", "max_include_depth", "max_nesting_depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"'{name}' must be a positive integer, got {value!r}")
        if not self.template_paths:
            raise ConfigError("'template_paths' must list at least one directory")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Creates a configuration from a mapping (from YAML)."""
        known = {"loop_limit", "max_include_depth", "max_nesting_depth",
                 "template_paths", "encoding", "cache_templates"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        paths = data.get("template_paths", ["."])
        if isinstance(paths, str):
            paths = [paths]

        return cls(
            loop_limit=data.get("loop_limit", 100_000),
            max_include_depth=data.get("max_include_depth", 16),
            max_nesting_depth=data.get("max_nesting_depth", 128),
            template_paths=[str(p) for p in paths],
            encoding=str(data.get("encoding", "utf-8")),
            cache_templates=bool(data.get("cache_templates", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialisation to a mapping for YAML."""
        return {
            "loop_limit": self.loop_limit,
            "max_include_depth": self.max_include_depth,
            "max_nesting_depth": self.max_nesting_depth,
            "template_paths": list(self.template_paths),
            "encoding": self.encoding,
            "cache_templates": self.cache_templates,
        }


def _read_yaml_map(path: Path) -> dict:
    """Reads a YAML file that must contain a mapping."""
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def load_config(path: Path) -> EngineConfig:
    """
    Loads configuration from a YAML file.

    Relative template_paths are resolved against the file's directory.

    Args:
        path: Path to the configuration file

    Returns:
        Engine configuration

    Raises:
        ConfigError: If the file is missing, not a mapping or has invalid values
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    config = EngineConfig.from_dict(_read_yaml_map(path))
    base = path.parent
    config.template_paths = [
        str(p) if Path(p).is_absolute() else str((base / p).resolve())
        for p in config.template_paths
    ]
    logger.debug(f"Loaded config from {path}: {config.to_dict()}")
    return config


def find_config(start: Path) -> Optional[Path]:
    """
    Returns the xoly.yaml in the given directory, if present.
    """
    candidate = start / CONFIG_FILE
    return candidate if candidate.is_file() else None


def load_variables(path: Path) -> Dict[str, Any]:
    """
    Loads initial template variables from a YAML mapping.

    Raises:
        ConfigError: If the file is missing or not a mapping
    """
    if not path.is_file():
        raise ConfigError(f"Variables file not found: {path}")
    return dict(_read_yaml_map(path))


__all__ = ["EngineConfig", "CONFIG_FILE", "load_config", "find_config", "load_variables"]
