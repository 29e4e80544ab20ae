"""YAML options loading and validation."""

from __future__ import annotations

from pathlib import Path

import yaml

from img_size_cache.config.schema import AnnotatorOptions


def load_options_yaml(path: str | Path) -> AnnotatorOptions:
    """Load an options YAML file and return validated AnnotatorOptions."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Options YAML not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict) or "img_size_cache" not in raw:
        raise ValueError(f"Invalid options YAML: missing top-level 'img_size_cache' key in {path}")

    section = raw["img_size_cache"] or {}
    if not isinstance(section, dict):
        raise ValueError(f"Expected a mapping under 'img_size_cache' in {path}")

    return AnnotatorOptions(**section)
