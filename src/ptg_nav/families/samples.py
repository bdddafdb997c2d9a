from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from ptg_nav.families.base import Pose2D


@dataclass(frozen=True)
class SampledPaths:
    """
    Per-path samples. Paths may have different lengths, so each field is a
    list of 1-D arrays indexed by path.
    """
    x: List[np.ndarray]
    y: List[np.ndarray]
    phi: List[np.ndarray]
    d: List[np.ndarray]  # cumulative distance [m]

    @property
    def path_count(self) -> int:
        return len(self.d)

    def step_count(self, k: int) -> int:
        return int(self.d[k].shape[0])

    def pose(self, k: int, step: int) -> Pose2D:
        return Pose2D(x=float(self.x[k][step]), y=float(self.y[k][step]), phi=float(self.phi[k][step]))

    def distance(self, k: int, step: int) -> float:
        return float(self.d[k][step])
