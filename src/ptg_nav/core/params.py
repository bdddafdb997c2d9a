from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict

from ptg_nav.core.collision import CollisionBehavior
from ptg_nav.core.errors import ConfigurationError

DEFAULT_DEBUG_OUTPUT_DIR = "./reactivenav.logs"

# Key descriptions written next to the values by GeneratorParameters.to_config().
PARAM_DESCRIPTIONS = {
    "num_paths": "Number of discrete paths (`resolution`) in the PTG",
    "refDistance": "Maximum distance (meters) for building trajectories (visibility range)",
    "score_priority": (
        "When used in path planning, a multiplying factor (default=1.0) for the scores "
        "for this PTG. Assign values <1 to PTGs with low priority."
    ),
}


def _section(cfg: Dict[str, Any], section: str) -> Dict[str, Any]:
    if section not in cfg:
        raise ConfigurationError(f"Missing config section: {section!r}")
    sec = cfg[section]
    if not isinstance(sec, dict):
        raise ConfigurationError(f"Config section {section!r} must be a mapping (dict).")
    return sec


def _required(sec: Dict[str, Any], section: str, key: str) -> Any:
    if key not in sec or sec[key] is None:
        raise ConfigurationError(f"Missing required parameter {key!r} in section {section!r}")
    return sec[key]


@dataclass(frozen=True)
class GeneratorParameters:
    """Tunable parameters shared by every path family."""
    path_count: int
    ref_distance: float      # [m]
    score_priority: float = 1.0

    def __post_init__(self) -> None:
        if isinstance(self.path_count, bool) or not isinstance(self.path_count, int):
            raise ConfigurationError(f"path_count must be an integer, got {self.path_count!r}")
        if self.path_count < 1:
            raise ConfigurationError("path_count must be >= 1")
        if not (math.isfinite(self.ref_distance) and self.ref_distance > 0.0):
            raise ConfigurationError("ref_distance must be a positive finite number")
        if not (math.isfinite(self.score_priority) and self.score_priority >= 0.0):
            raise ConfigurationError("score_priority must be a finite number >= 0")

    @classmethod
    def default(cls) -> "GeneratorParameters":
        return cls(path_count=121, ref_distance=6.0, score_priority=1.0)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], section: str) -> "GeneratorParameters":
        """
        Read parameters from a config section:
          num_paths      (int, required)
          refDistance    (float, required)
          score_priority (float, default 1.0)
        """
        sec = _section(cfg, section)
        raw_n = _required(sec, section, "num_paths")
        raw_d = _required(sec, section, "refDistance")
        raw_p = sec.get("score_priority", 1.0)
        try:
            n = int(raw_n)
            if n != float(raw_n):
                raise ValueError(raw_n)
            d = float(raw_d)
            p = float(raw_p)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid parameter value in section {section!r}: {e}") from e
        return cls(path_count=n, ref_distance=d, score_priority=p)

    def to_config(self, cfg: Dict[str, Any], section: str) -> Dict[str, Any]:
        """Write the three keys into cfg[section] (created if missing) and return cfg."""
        sec = cfg.setdefault(section, {})
        sec["num_paths"] = int(self.path_count)
        sec["refDistance"] = float(self.ref_distance)
        sec["score_priority"] = float(self.score_priority)
        return cfg


@dataclass(frozen=True)
class GeneratorSettings:
    """Behavior switches that are not part of the serialized parameters."""
    collision_behavior: CollisionBehavior = CollisionBehavior.BACK_AWAY
    debug_output_dir: str = DEFAULT_DEBUG_OUTPUT_DIR

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], section: str) -> "GeneratorSettings":
        sec = _section(cfg, section)
        behavior = CollisionBehavior.parse(sec.get("collision_behavior", CollisionBehavior.BACK_AWAY))
        out_dir = str(sec.get("debug_output_dir", DEFAULT_DEBUG_OUTPUT_DIR))
        return cls(collision_behavior=behavior, debug_output_dir=out_dir)
