from __future__ import annotations

import math
from typing import Any, Dict

from ptg_nav.core.errors import ConfigurationError
from ptg_nav.families.profiles import ArcProfile, ClothoidProfile
from ptg_nav.families.sampled import SampledPathFamily

FAMILY_NAMES = ("arc", "clothoid")


class ArcFamily(SampledPathFamily):
    """Circular arcs of a differential-drive robot."""

    def __init__(
        self,
        robot_radius: float = 0.3,
        max_curvature: float = 2.0,
        step_distance: float = 0.05,
        max_heading: float = math.pi,
        max_steps: int = 2000,
    ) -> None:
        super().__init__(
            profile=ArcProfile(max_curvature=max_curvature),
            robot_radius=robot_radius,
            step_distance=step_distance,
            max_heading=max_heading,
            max_steps=max_steps,
        )


class ClothoidFamily(SampledPathFamily):
    """Clothoids (linearly increasing curvature) starting straight ahead."""

    def __init__(
        self,
        robot_radius: float = 0.3,
        sharpness: float = 1.0,
        max_curvature: float = 2.0,
        step_distance: float = 0.05,
        max_heading: float = math.pi,
        max_steps: int = 2000,
    ) -> None:
        super().__init__(
            profile=ClothoidProfile(sharpness=sharpness, max_curvature=max_curvature),
            robot_radius=robot_radius,
            step_distance=step_distance,
            max_heading=max_heading,
            max_steps=max_steps,
        )


_FACTORIES = {
    "arc": (ArcFamily, ("robot_radius", "max_curvature", "step_distance", "max_heading", "max_steps")),
    "clothoid": (
        ClothoidFamily,
        ("robot_radius", "sharpness", "max_curvature", "step_distance", "max_heading", "max_steps"),
    ),
}


def make_family(name: str, **options: Any) -> SampledPathFamily:
    """
    Build a path family by name. Unknown names and unknown options are
    configuration errors.
    """
    key = name.lower().strip()
    if key not in _FACTORIES:
        raise ConfigurationError(f"Unknown path family: {name!r} (expected one of {FAMILY_NAMES})")
    factory, allowed = _FACTORIES[key]
    unknown = sorted(set(options) - set(allowed))
    if unknown:
        raise ConfigurationError(f"Unknown options for {key!r} family: {unknown}")
    return factory(**options)


def family_from_config(cfg: Dict[str, Any], section: str) -> SampledPathFamily:
    """
    Read `family` (default "arc") and the family options from cfg[section].
    Keys that belong to the generator parameters are ignored here.
    """
    sec = cfg.get(section)
    if not isinstance(sec, dict):
        raise ConfigurationError(f"Missing config section: {section!r}")
    name = str(sec.get("family", "arc"))
    key = name.lower().strip()
    if key not in _FACTORIES:
        raise ConfigurationError(f"Unknown path family: {name!r} (expected one of {FAMILY_NAMES})")
    _, allowed = _FACTORIES[key]
    options = {}
    for opt in allowed:
        if opt in sec:
            try:
                options[opt] = int(sec[opt]) if opt == "max_steps" else float(sec[opt])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid value for {opt!r} in section {section!r}: {e}") from e
    return make_family(key, **options)
