from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from ptg_nav.core.params import GeneratorParameters


@dataclass(frozen=True)
class Pose2D:
    """Pose in the robot's local frame at the start of a path."""
    x: float     # [m]
    y: float     # [m]
    phi: float   # [rad]


@runtime_checkable
class PathFamily(Protocol):
    """
    Capability every motion-primitive family provides to the generator.

    Geometry is only valid between build() and release(); the generator
    guarantees that ordering and never calls the query methods outside it.
    """

    def build(self, params: GeneratorParameters, cache_key: Optional[str], verbose: bool) -> None:
        ...

    def release(self) -> None:
        ...

    def step_count(self, k: int) -> int:
        ...

    def pose(self, k: int, step: int) -> Pose2D:
        ...

    def distance(self, k: int, step: int) -> float:
        ...

    def is_point_inside_robot_shape(self, x: float, y: float) -> bool:
        ...

    def approx_robot_radius(self) -> float:
        ...

    def obstacle_distance(self, k: int, x: float, y: float) -> Optional[float]:
        """Distance along path k at which the footprint meets (x, y); None if never."""
        ...

    def supports_vel_cmd_nop(self) -> bool:
        ...

    def max_time_in_vel_cmd_nop(self, k: int) -> float:
        ...
