from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ptg_nav.core.errors import ConfigurationError


@dataclass(frozen=True)
class CircularFootprint:
    radius: float  # [m]

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise ConfigurationError("robot_radius must be > 0")

    def contains(self, x: float, y: float) -> bool:
        return x * x + y * y < self.radius * self.radius

    def collision_distance(
        self,
        xs: np.ndarray,   # (T,)
        ys: np.ndarray,   # (T,)
        ds: np.ndarray,   # (T,) cumulative distance
        ox: float,
        oy: float,
    ) -> Optional[float]:
        """
        Along-path distance at which the footprint first touches (ox, oy).

        If the point is already inside the footprint at the path start, the
        returned value is the distance at which the robot gets clear of it
        (the whole path length if it never does). A short value therefore
        means the path moves away from the obstacle.
        """
        r2 = self.radius * self.radius
        inside = (xs - ox) ** 2 + (ys - oy) ** 2 < r2

        if inside[0]:
            outside = ~inside
            if not outside.any():
                return float(ds[-1])
            return float(ds[int(np.argmax(outside))])

        if not inside.any():
            return None
        return float(ds[int(np.argmax(inside))])
