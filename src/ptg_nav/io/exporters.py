from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

from ptg_nav.core.generator import TrajectoryGenerator
from ptg_nav.io.paths import RunPaths, make_debug_paths

logger = logging.getLogger(__name__)

_HEADER = "% PTG data file for '{}'. Each row is the trajectory for a different 'alpha' parameter value."


def sample_table(gen: TrajectoryGenerator) -> dict[str, pd.DataFrame]:
    """
    Sampled (x, y, phi, d) of every path as four DataFrames: one row per
    path, one column per step. Shorter paths repeat their last sample.
    """
    n_paths = gen.path_count
    lengths = [gen.get_path_step_count(k) for k in range(n_paths)]
    max_points = max(lengths)

    tables = {name: np.empty((n_paths, max_points), dtype=float) for name in ("x", "y", "phi", "d")}
    for k in range(n_paths):
        for n in range(max_points):
            nn = min(n, lengths[k] - 1)
            p = gen.get_path_pose(k, nn)
            tables["x"][k, n] = p.x
            tables["y"][k, n] = p.y
            tables["phi"][k, n] = p.phi
            tables["d"][k, n] = gen.get_path_dist(k, nn)

    return {name: pd.DataFrame(arr) for name, arr in tables.items()}


def debug_dump_in_files(
    gen: TrajectoryGenerator,
    ptg_name: Optional[str] = None,
    base_dir: str | Path | None = None,
) -> bool:
    """
    Write PTGs/PTG<name>_{x,y,phi,d}.txt under base_dir (default: the
    generator's debug_output_dir). Plain text, space separated.

    Returns False (and logs) on any file system error; never raises for I/O.
    """
    name = ptg_name if ptg_name is not None else gen.name
    out_dir = base_dir if base_dir is not None else gen.settings.debug_output_dir

    tables = sample_table(gen)
    try:
        paths = make_debug_paths(out_dir, name)
        targets = {"x": paths.x_txt, "y": paths.y_txt, "phi": paths.phi_txt, "d": paths.d_txt}
        for field, target in targets.items():
            with target.open("w", encoding="utf-8") as f:
                f.write(_HEADER.format(field) + "\n")
                tables[field].to_csv(f, sep=" ", header=False, index=False)
    except OSError as e:
        logger.warning("[%s] Debug dump to %s failed: %s", name, out_dir, e)
        return False

    logger.info("[%s] Debug dump written to %s", name, paths.ptg_dir)
    return True


def export_tp_obstacles_csv(paths: RunPaths, gen: TrajectoryGenerator, tp_obstacles: np.ndarray) -> None:
    """
    One row per path: k, alpha, free distance and its no-obstacle baseline.
    """
    df = pd.DataFrame(
        {
            "k": np.arange(gen.path_count),
            "alpha_rad": [gen.index_to_alpha(k) for k in range(gen.path_count)],
            "free_distance_m": tp_obstacles,
            "baseline_m": gen.init_tp_obstacles(),
        }
    )
    df.to_csv(paths.tp_obstacles_csv, index=False)


def export_obstacles_csv(paths: RunPaths, obstacles: np.ndarray) -> None:
    df = pd.DataFrame(np.asarray(obstacles, dtype=float).reshape(-1, 2), columns=["x_m", "y_m"])
    df.to_csv(paths.obstacles_csv, index=False)
