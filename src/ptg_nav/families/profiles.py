from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ptg_nav.core.errors import ConfigurationError


@dataclass(frozen=True)
class ArcProfile:
    """Constant-curvature arcs: kappa = max_curvature * alpha / pi."""
    max_curvature: float = 2.0  # [1/m]

    kind = "arc"

    def __post_init__(self) -> None:
        if not self.max_curvature > 0.0:
            raise ConfigurationError("max_curvature must be > 0")

    def curvature(self, alpha: float, s: np.ndarray) -> np.ndarray:
        return np.full_like(s, self.max_curvature * alpha / math.pi)


@dataclass(frozen=True)
class ClothoidProfile:
    """
    Clothoids starting straight: kappa grows linearly with distance,
    kappa(s) = sharpness * (alpha/pi) * s, saturated at +-max_curvature.
    """
    sharpness: float = 1.0      # [1/m^2]
    max_curvature: float = 2.0  # [1/m]

    kind = "clothoid"

    def __post_init__(self) -> None:
        if not self.sharpness > 0.0:
            raise ConfigurationError("sharpness must be > 0")
        if not self.max_curvature > 0.0:
            raise ConfigurationError("max_curvature must be > 0")

    def curvature(self, alpha: float, s: np.ndarray) -> np.ndarray:
        kappa = self.sharpness * (alpha / math.pi) * s
        return np.clip(kappa, -self.max_curvature, self.max_curvature)
