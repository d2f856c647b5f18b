"""YAML configuration loading for mapper profiles."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

__all__ = ["load_config", "load_section"]


def load_config(path: str | Path) -> dict[str, Any]:
    """Return the parsed YAML document located at ``path``.

    An empty document yields an empty dict. Anything other than a mapping at
    the root is rejected with :class:`ValueError`.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    raw_text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse configuration: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    return data


def load_section(path: str | Path, name: str) -> Mapping[str, Any]:
    """Return the mapping stored under ``name``; a missing section is empty."""

    section = load_config(path).get(name)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError(f"configuration section '{name}' must be a mapping")
    return section
