from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ptg_nav.core.errors import ConfigurationError
from ptg_nav.core.generator import TrajectoryGenerator


def path_as_polyline(
    gen: TrajectoryGenerator,
    k: int,
    decimate_distance: float = 0.1,
    max_path_distance: Optional[float] = None,
) -> np.ndarray:
    """
    Decimated (M,2) polyline of path k for drawing, starting at the origin.

    A sample is emitted only when the path has advanced at least
    decimate_distance since the last emitted one. Samples at or beyond
    max_path_distance are dropped.
    """
    if decimate_distance < 0.0:
        raise ConfigurationError("decimate_distance must be >= 0")

    points = [(0.0, 0.0)]
    last_added = 0.0
    for n in range(gen.get_path_step_count(k)):
        d = gen.get_path_dist(k, n)
        if max_path_distance is not None and max_path_distance >= 0.0 and d >= max_path_distance:
            break
        if n != 0 and d < last_added + decimate_distance:
            continue
        last_added = d
        p = gen.get_path_pose(k, n)
        points.append((p.x, p.y))

    return np.array(points, dtype=float)


def plot_path_family(
    ax,
    gen: TrajectoryGenerator,
    every: int = 1,
    decimate_distance: float = 0.1,
    tp_obstacles: Optional[np.ndarray] = None,
):
    """
    Draw every `every`-th path. With tp_obstacles given, each path is cut at
    its free distance, as the robot would see it.
    """
    for k in range(0, gen.path_count, max(1, every)):
        cut = None if tp_obstacles is None else float(tp_obstacles[k])
        line = path_as_polyline(gen, k, decimate_distance=decimate_distance, max_path_distance=cut)
        ax.plot(line[:, 0], line[:, 1], linewidth=0.8)

    radius = gen.family.approx_robot_radius()
    t = np.linspace(0.0, 2.0 * np.pi, 64)
    ax.plot(radius * np.cos(t), radius * np.sin(t), color="k", linewidth=1.5)
    ax.set_aspect("equal", adjustable="box")
    ax.set_xlabel("x [m]")
    ax.set_ylabel("y [m]")
    return ax


def plot_obstacles(ax, obstacles: Sequence[Sequence[float]]):
    pts = np.asarray(obstacles, dtype=float).reshape(-1, 2)
    if pts.shape[0] > 0:
        ax.scatter(pts[:, 0], pts[:, 1], marker="x", color="r")
    return ax


def plot_tp_obstacles(ax, gen: TrajectoryGenerator, tp_obstacles: np.ndarray):
    """Free distance over alpha, with the no-obstacle baseline dashed."""
    alphas = np.array([gen.index_to_alpha(k) for k in range(gen.path_count)])
    ax.plot(alphas, gen.init_tp_obstacles(), linestyle="--", label="no obstacles")
    ax.plot(alphas, tp_obstacles, label="free distance")
    ax.set_xlabel("alpha [rad]")
    ax.set_ylabel("distance [m]")
    ax.legend()
    return ax
