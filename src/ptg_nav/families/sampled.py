from __future__ import annotations

import logging
import math
import time
from typing import Optional, Protocol

import numpy as np

from ptg_nav.core.codec import serialize_params
from ptg_nav.core.discretizer import index_to_alpha
from ptg_nav.core.errors import ConfigurationError, NotInitializedError, PathIndexError
from ptg_nav.core.params import GeneratorParameters
from ptg_nav.families.base import Pose2D
from ptg_nav.families.cache import load_cached_paths, save_cached_paths
from ptg_nav.families.footprint import CircularFootprint
from ptg_nav.families.samples import SampledPaths

logger = logging.getLogger(__name__)


class CurvatureProfile(Protocol):
    kind: str

    def curvature(self, alpha: float, s: np.ndarray) -> np.ndarray:
        ...


def integrate_path(
    profile: CurvatureProfile,
    alpha: float,
    length: float,
    step_distance: float,
    max_heading: float,
    max_steps: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Integrate one path from the origin, heading 0, for up to `length` meters.

    Each segment is advanced along its chord: direction = mid-segment heading,
    chord = ds * sinc(dphi/2). Exact for constant curvature.
    The path is cut before the heading leaves [-max_heading, max_heading].
    """
    n = min(int(math.ceil(length / step_distance)) + 1, max_steps)
    n = max(n, 2)
    s = np.linspace(0.0, length, n)
    kappa = profile.curvature(alpha, s)

    ds = np.diff(s)
    dphi = 0.5 * (kappa[1:] + kappa[:-1]) * ds
    phi = np.concatenate([[0.0], np.cumsum(dphi)])

    mid = phi[:-1] + 0.5 * dphi
    chord = ds * np.sinc(dphi / (2.0 * np.pi))
    x = np.concatenate([[0.0], np.cumsum(chord * np.cos(mid))])
    y = np.concatenate([[0.0], np.cumsum(chord * np.sin(mid))])

    over = np.abs(phi) > max_heading
    if over.any():
        m = max(int(np.argmax(over)), 1)
        x, y, phi, s = x[:m], y[:m], phi[:m], s[:m]

    return x, y, phi, s


def integrate_paths(
    profile: CurvatureProfile,
    params: GeneratorParameters,
    step_distance: float,
    max_heading: float,
    max_steps: int,
) -> SampledPaths:
    xs, ys, phis, dists = [], [], [], []
    for k in range(params.path_count):
        alpha = index_to_alpha(k, params.path_count)
        x, y, phi, d = integrate_path(
            profile, alpha, params.ref_distance, step_distance, max_heading, max_steps
        )
        xs.append(x)
        ys.append(y)
        phis.append(phi)
        dists.append(d)
    return SampledPaths(x=xs, y=ys, phi=phis, d=dists)


class SampledPathFamily:
    """
    Path family backed by numerically integrated samples and a circular
    footprint. The motion model is the injected curvature profile.
    """
    def __init__(
        self,
        profile: CurvatureProfile,
        robot_radius: float = 0.3,
        step_distance: float = 0.05,
        max_heading: float = math.pi,
        max_steps: int = 2000,
    ) -> None:
        if not step_distance > 0.0:
            raise ConfigurationError("step_distance must be > 0")
        if max_steps < 2:
            raise ConfigurationError("max_steps must be >= 2")
        self.profile = profile
        self.footprint = CircularFootprint(robot_radius)
        self.step_distance = float(step_distance)
        self.max_heading = float(max_heading)
        self.max_steps = int(max_steps)
        self._paths: Optional[SampledPaths] = None

    @property
    def kind(self) -> str:
        return self.profile.kind

    def signature(self, params: GeneratorParameters) -> bytes:
        """Identifies the geometry; a cache entry is reused only on exact match."""
        options = (
            f"{self.profile!r};r={self.footprint.radius!r};ds={self.step_distance!r};"
            f"hmax={self.max_heading!r};nmax={self.max_steps}"
        )
        return serialize_params(params) + options.encode("utf-8")

    def build(self, params: GeneratorParameters, cache_key: Optional[str] = None, verbose: bool = False) -> None:
        signature = self.signature(params)
        if cache_key:
            cached = load_cached_paths(cache_key, signature)
            if cached is not None:
                self._paths = cached
                if verbose:
                    logger.info("[%s] Loaded %d paths from cache %s", self.kind, cached.path_count, cache_key)
                return

        t0 = time.perf_counter()
        paths = integrate_paths(self.profile, params, self.step_distance, self.max_heading, self.max_steps)
        if verbose:
            logger.info(
                "[%s] Built %d paths in %.3f s", self.kind, paths.path_count, time.perf_counter() - t0
            )
        if cache_key:
            save_cached_paths(cache_key, signature, paths)
        self._paths = paths

    def release(self) -> None:
        self._paths = None

    def _require(self) -> SampledPaths:
        if self._paths is None:
            raise NotInitializedError(f"{self.kind} family geometry has not been built")
        return self._paths

    def _check_k(self, paths: SampledPaths, k: int) -> None:
        if not 0 <= k < paths.path_count:
            raise PathIndexError(f"Path index {k} outside [0, {paths.path_count})")

    def step_count(self, k: int) -> int:
        paths = self._require()
        self._check_k(paths, k)
        return paths.step_count(k)

    def pose(self, k: int, step: int) -> Pose2D:
        paths = self._require()
        self._check_k(paths, k)
        return paths.pose(k, step)

    def distance(self, k: int, step: int) -> float:
        paths = self._require()
        self._check_k(paths, k)
        return paths.distance(k, step)

    def is_point_inside_robot_shape(self, x: float, y: float) -> bool:
        return self.footprint.contains(x, y)

    def approx_robot_radius(self) -> float:
        return self.footprint.radius

    def obstacle_distance(self, k: int, x: float, y: float) -> Optional[float]:
        paths = self._require()
        self._check_k(paths, k)
        return self.footprint.collision_distance(paths.x[k], paths.y[k], paths.d[k], x, y)

    def supports_vel_cmd_nop(self) -> bool:
        return False

    def max_time_in_vel_cmd_nop(self, k: int) -> float:
        return 0.0
