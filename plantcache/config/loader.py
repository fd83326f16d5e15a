"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import PlantCacheConfig


def load_config(cli_path: str | None = None) -> PlantCacheConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./plantcache.yaml"),
        Path.home() / ".plantcache" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return PlantCacheConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return PlantCacheConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `plantcache config init`
DEFAULT_CONFIG_TEMPLATE = """\
# plantcache.yaml

# Local renderer
renderer:
  local_jar: "~/plantuml.jar"  # jar or executable; ~, absolute, or relative to the document
  dot_path: "dot"              # "dot" lets PlantUML find Graphviz on PATH
  java_path: "java"

# Render cache
cache:
  backend: "sqlite"            # sqlite | memory
  path: "~/.plantcache/cache.db"

# Base directory for relative document paths
base_dir: "."

# Logging
log_level: "info"              # debug | info | warn | error
"""
