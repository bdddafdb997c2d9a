from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from ptg_nav.core.codec import deserialize_params, serialize_params
from ptg_nav.core.collision import fold_tp_obstacle
from ptg_nav.core.discretizer import alpha_to_index, index_to_alpha
from ptg_nav.core.errors import ContractViolation, NotInitializedError, PathIndexError
from ptg_nav.core.locking import ReadWriteLock
from ptg_nav.core.params import GeneratorParameters, GeneratorSettings
from ptg_nav.families.base import PathFamily, Pose2D
from ptg_nav.families.registry import family_from_config

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class TrajectoryGenerator:
    """
    Parameterized trajectory generator (PTG).

    Maps the steering parameter alpha onto `path_count` precomputed paths of
    the given family, and projects obstacle points into TP-Space: for each
    path, the distance that can be traveled before the robot footprint hits
    an obstacle.

    Path queries and obstacle projection are read operations and may run from
    several threads at once. initialize(), deinitialize(), reconfigure() and
    deserialize() take an exclusive lock.
    """

    def __init__(
        self,
        family: PathFamily,
        params: Optional[GeneratorParameters] = None,
        settings: Optional[GeneratorSettings] = None,
        name: str = "ptg",
    ) -> None:
        self.family = family
        self.name = name
        self._params = params if params is not None else GeneratorParameters.default()
        self._settings = settings if settings is not None else GeneratorSettings()
        self._state = LifecycleState.UNINITIALIZED
        self._lock = ReadWriteLock()

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], section: str) -> "TrajectoryGenerator":
        """Assemble parameters, settings and family from one config section."""
        return cls(
            family=family_from_config(cfg, section),
            params=GeneratorParameters.from_config(cfg, section),
            settings=GeneratorSettings.from_config(cfg, section),
            name=section,
        )

    # ------------------------------------------------------------------
    # parameters & persistence
    # ------------------------------------------------------------------

    @property
    def params(self) -> GeneratorParameters:
        return self._params

    @property
    def settings(self) -> GeneratorSettings:
        return self._settings

    @property
    def path_count(self) -> int:
        return self._params.path_count

    @property
    def ref_distance(self) -> float:
        return self._params.ref_distance

    @property
    def score_priority(self) -> float:
        return self._params.score_priority

    def save_to_config(self, cfg: Dict[str, Any], section: str) -> Dict[str, Any]:
        return self._params.to_config(cfg, section)

    def serialize(self) -> bytes:
        return serialize_params(self._params)

    def deserialize(self, data: bytes) -> None:
        """
        Adopt parameters from a serialized buffer.

        The buffer is decoded before anything changes, so a bad buffer leaves
        the generator as it was. On success any geometry built for the old
        parameters is discarded.
        """
        params = deserialize_params(data)
        with self._lock.write_locked():
            self._deinitialize_locked()
            self._params = params

    def reconfigure(self, params: GeneratorParameters) -> None:
        with self._lock.write_locked():
            self._deinitialize_locked()
            self._params = params

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> LifecycleState:
        return self._state

    def is_initialized(self) -> bool:
        return self._state is LifecycleState.READY

    def initialize(self, cache_key: Optional[str] = None, verbose: bool = False) -> None:
        """
        Build the path geometry once. Calling it again while initialized does
        nothing; call deinitialize() first to rebuild.
        """
        with self._lock.write_locked():
            if self._state is LifecycleState.READY:
                return
            self._state = LifecycleState.INITIALIZING
            try:
                self.family.build(self._params, cache_key, verbose)
            except BaseException:
                self._state = LifecycleState.UNINITIALIZED
                logger.error("[%s] Path geometry build failed", self.name)
                raise
            self._state = LifecycleState.READY
        if verbose:
            logger.info(
                "[%s] Initialized: %d paths, refDistance=%.3f m",
                self.name, self._params.path_count, self._params.ref_distance,
            )

    def deinitialize(self) -> None:
        with self._lock.write_locked():
            self._deinitialize_locked()

    def _deinitialize_locked(self) -> None:
        if self._state is not LifecycleState.READY:
            return
        self.family.release()
        self._state = LifecycleState.UNINITIALIZED
        logger.debug("[%s] Deinitialized", self.name)

    def _require_ready(self) -> None:
        if self._state is not LifecycleState.READY:
            raise NotInitializedError(f"[{self.name}] initialize() must be called first")

    def _check_k(self, k: int) -> None:
        if not 0 <= k < self._params.path_count:
            raise PathIndexError(f"Path index {k} outside [0, {self._params.path_count})")

    # ------------------------------------------------------------------
    # alpha <-> path index
    # ------------------------------------------------------------------

    def alpha_to_index(self, alpha: float) -> int:
        return alpha_to_index(alpha, self._params.path_count)

    def index_to_alpha(self, k: int) -> float:
        return index_to_alpha(k, self._params.path_count)

    # ------------------------------------------------------------------
    # path samples
    # ------------------------------------------------------------------

    def get_path_step_count(self, k: int) -> int:
        with self._lock.read_locked():
            self._require_ready()
            self._check_k(k)
            return self.family.step_count(k)

    def get_path_pose(self, k: int, step: int) -> Pose2D:
        with self._lock.read_locked():
            self._require_ready()
            self._check_step(k, step)
            return self.family.pose(k, step)

    def get_path_dist(self, k: int, step: int) -> float:
        with self._lock.read_locked():
            self._require_ready()
            self._check_step(k, step)
            return self.family.distance(k, step)

    def _check_step(self, k: int, step: int) -> None:
        self._check_k(k)
        n = self.family.step_count(k)
        if not 0 <= step < n:
            raise PathIndexError(f"Step {step} outside [0, {n}) for path {k}")

    def supports_vel_cmd_nop(self) -> bool:
        return self.family.supports_vel_cmd_nop()

    def max_time_in_vel_cmd_nop(self, k: int) -> float:
        self._check_k(k)
        return self.family.max_time_in_vel_cmd_nop(k)

    # ------------------------------------------------------------------
    # TP-Space obstacles
    # ------------------------------------------------------------------

    def init_tp_obstacle_single(self, k: int) -> float:
        with self._lock.read_locked():
            self._require_ready()
            self._check_k(k)
            return self._init_single(k)

    def init_tp_obstacles(self) -> np.ndarray:
        """Free distance of every path with no obstacles."""
        with self._lock.read_locked():
            self._require_ready()
            return self._init_all()

    def update_tp_obstacle_single(self, ox: float, oy: float, k: int, tp_obstacle_k: float) -> float:
        """Return path k's free distance after accounting for obstacle (ox, oy)."""
        with self._lock.read_locked():
            self._require_ready()
            self._check_k(k)
            inside = self.family.is_point_inside_robot_shape(ox, oy)
            return self._update_single(ox, oy, k, tp_obstacle_k, inside)

    def update_tp_obstacles(self, ox: float, oy: float, tp_obstacles: np.ndarray) -> None:
        """Fold obstacle (ox, oy) into every entry of tp_obstacles, in place."""
        with self._lock.read_locked():
            self._require_ready()
            if tp_obstacles.shape != (self._params.path_count,):
                raise ContractViolation(
                    f"tp_obstacles must have shape ({self._params.path_count},), got {tp_obstacles.shape}"
                )
            self._update_all(ox, oy, tp_obstacles)

    def compute_free_distances(self, obstacles: Any) -> np.ndarray:
        """
        obstacles: (N,2) points in the robot frame (array-like; may be empty)
        returns:   (path_count,) free distance per path, each in
                   [0, min(refDistance, path length)]
        """
        pts = np.asarray(obstacles, dtype=float)
        if pts.size == 0:
            pts = pts.reshape(0, 2)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ContractViolation(f"obstacles must be an (N,2) array, got shape {pts.shape}")

        with self._lock.read_locked():
            self._require_ready()
            tp = self._init_all()
            for ox, oy in pts:
                if not (math.isfinite(ox) and math.isfinite(oy)):
                    logger.debug("[%s] Skipping non-finite obstacle (%r, %r)", self.name, ox, oy)
                    continue
                self._update_all(float(ox), float(oy), tp)
        return tp

    def _init_single(self, k: int) -> float:
        last = self.family.step_count(k) - 1
        return min(self._params.ref_distance, self.family.distance(k, last))

    def _init_all(self) -> np.ndarray:
        return np.array([self._init_single(k) for k in range(self._params.path_count)], dtype=float)

    def _update_single(self, ox: float, oy: float, k: int, current: float, inside: bool) -> float:
        candidate = self.family.obstacle_distance(k, ox, oy)
        if candidate is None:
            return current
        return fold_tp_obstacle(
            current=current,
            candidate=max(0.0, candidate),
            inside_footprint=inside,
            robot_radius=self.family.approx_robot_radius(),
            behavior=self._settings.collision_behavior,
        )

    def _update_all(self, ox: float, oy: float, tp: np.ndarray) -> None:
        inside = self.family.is_point_inside_robot_shape(ox, oy)
        for k in range(self._params.path_count):
            tp[k] = self._update_single(ox, oy, k, float(tp[k]), inside)
