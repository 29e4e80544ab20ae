"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.img-size-cache/config.yaml)
  3. Project config   (./img-size-cache.yaml, searched upward)
  4. Environment variables (IMG_SIZE_CACHE_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from img_size_cache.config.defaults import get_defaults
from img_size_cache.config.schema import AnnotatorOptions

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".img-size-cache" / "config.yaml"
_PROJECT_CONFIG_NAME = "img-size-cache.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "IMG_SIZE_CACHE_FILE": "cache_file_path",
    "IMG_SIZE_CACHE_NO_REMOTE": "no_remote",
    "IMG_SIZE_CACHE_TIMEOUT": "request_timeout",
    "IMG_SIZE_CACHE_USER_AGENT": "user_agent",
    "IMG_SIZE_CACHE_BASE_DIR": "base_dir",
    "IMG_SIZE_CACHE_MAX_CONCURRENCY": "max_concurrency",
    "IMG_SIZE_CACHE_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "cache_file_path": Path,
    "base_dir": Path,
    "request_timeout": float,
    "max_concurrency": int,
}

# Flag keys, true for any of _TRUTHY
_BOOL_KEYS = frozenset({"no_remote"})
_TRUTHY = {"1", "true", "yes", "on"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()

    # Layer 2: Global config
    global_cfg = _load_yaml_config(_GLOBAL_CONFIG_PATH)
    if global_cfg:
        config.update(global_cfg)

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            config.update(project_cfg)

    # Layer 4: Environment variables
    env_cfg = _load_env_vars()
    if env_cfg.pop("no_remote", False):
        env_cfg["process_remote_images"] = False
    config.update(env_cfg)

    # Layer 5: Runtime arguments (highest priority)
    # None means "not set" and never overrides
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def build_options(**runtime_overrides: Any) -> AnnotatorOptions:
    """Resolve the config hierarchy into validated AnnotatorOptions."""
    return AnnotatorOptions(**load_config_hierarchy(**runtime_overrides))


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists."""
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            return data
        logger.warning("Config file %s is not a mapping, ignoring", path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
    return None


def _find_project_config() -> Path | None:
    """Search for img-size-cache.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read IMG_SIZE_CACHE_* environment variables."""
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    if key in _BOOL_KEYS:
        return value.lower() in _TRUTHY

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
