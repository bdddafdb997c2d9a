from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from ptg_nav.core.errors import ConfigurationError


def load_yaml_config(path: str | Path) -> Dict[str, Any]:
    """
    Load a YAML config file and return it as a dict of sections.

    Each PTG is described by one top-level section, e.g.

      ptg_arc:
        family: arc
        num_paths: 121
        refDistance: 6.0
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p.resolve()}")

    with p.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Invalid config: root must be a mapping (dict).")

    return data


def save_yaml_config(path: str | Path, cfg: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        yaml.safe_dump(cfg, f, sort_keys=False)
