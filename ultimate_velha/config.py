"""YAML configuration loading."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

SECTIONS = ("evaluator", "timer", "session", "arena", "logging")


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Dict[str, Any]]:
    """Read a YAML config, falling back to the packaged defaults.

    Missing sections come back as empty dicts so callers can always use
    ``config["timer"].get(...)``.
    """

    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping at the top level")

    config: Dict[str, Dict[str, Any]] = {}
    for name, section in data.items():
        if section is not None and not isinstance(section, dict):
            raise ValueError(f"config section '{name}' must be a mapping")
        config[name] = dict(section or {})
    for name in SECTIONS:
        config.setdefault(name, {})
    return config


__all__ = ["DEFAULT_CONFIG_PATH", "load_config"]
