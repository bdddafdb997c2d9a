from __future__ import annotations

from enum import Enum

from ptg_nav.core.errors import ConfigurationError


class CollisionBehavior(Enum):
    """How to treat obstacles already inside the robot footprint."""
    STOP = "stop"
    BACK_AWAY = "back_away"

    @classmethod
    def parse(cls, value: "str | CollisionBehavior") -> "CollisionBehavior":
        if isinstance(value, cls):
            return value
        name = str(value).lower().strip().replace("-", "_")
        for member in cls:
            if member.value == name:
                return member
        raise ConfigurationError(f"Unknown collision behavior: {value!r}")


def fold_tp_obstacle(
    current: float,
    candidate: float,
    inside_footprint: bool,
    robot_radius: float,
    behavior: CollisionBehavior,
) -> float:
    """
    Fold one obstacle's candidate distance into a path's free distance.

    Outside the footprint this is a plain minimum. For obstacles inside the
    footprint at the path start:
      - STOP: the path is disallowed (0).
      - BACK_AWAY: a candidate shorter than the robot radius means the path
        leaves the obstacle, so the free distance is kept; otherwise the path
        drives through it and is disallowed.
    """
    if not inside_footprint:
        return min(current, candidate)

    if behavior is CollisionBehavior.STOP:
        return 0.0

    if behavior is CollisionBehavior.BACK_AWAY:
        if candidate < robot_radius:
            return current
        return 0.0

    raise ConfigurationError(f"Collision behavior not implemented: {behavior!r}")
