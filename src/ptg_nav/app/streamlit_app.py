from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import streamlit as st

from ptg_nav.core.collision import CollisionBehavior
from ptg_nav.core.generator import TrajectoryGenerator
from ptg_nav.core.params import GeneratorParameters, GeneratorSettings
from ptg_nav.families.registry import FAMILY_NAMES, make_family
from ptg_nav.io.config_loader import load_yaml_config
from ptg_nav.io.exporters import debug_dump_in_files, export_obstacles_csv, export_tp_obstacles_csv
from ptg_nav.io.paths import make_run_paths
from ptg_nav.viz.render import plot_obstacles, plot_path_family, plot_tp_obstacles


def _random_obstacles(count: int, spread_m: float, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.uniform(-spread_m, spread_m, size=(count, 2))


@st.cache_resource
def _build_generator(
    family: str,
    num_paths: int,
    ref_distance: float,
    robot_radius: float,
    max_curvature: float,
    behavior: str,
) -> TrajectoryGenerator:
    gen = TrajectoryGenerator(
        family=make_family(family, robot_radius=robot_radius, max_curvature=max_curvature),
        params=GeneratorParameters(path_count=num_paths, ref_distance=ref_distance),
        settings=GeneratorSettings(collision_behavior=CollisionBehavior.parse(behavior)),
        name=family,
    )
    gen.initialize()
    return gen


def main():
    st.set_page_config(page_title="PTG Inspector", layout="wide")
    st.title("Parameterized Trajectory Generator: paths & TP-Space obstacles")

    cfg = load_yaml_config(Path("configs/default.yaml"))
    sec = cfg["ptg_arc"]

    # Sidebar: generator
    st.sidebar.header("Generator")
    family = st.sidebar.selectbox("Family", options=list(FAMILY_NAMES), index=0)
    num_paths = int(st.sidebar.slider("num_paths", 3, 361, int(sec["num_paths"])))
    ref_distance = float(st.sidebar.slider("refDistance [m]", 0.5, 15.0, float(sec["refDistance"])))
    robot_radius = float(st.sidebar.slider("Robot radius [m]", 0.05, 1.0, float(sec["robot_radius"])))
    max_curvature = float(st.sidebar.slider("Max curvature [1/m]", 0.1, 5.0, float(sec["max_curvature"])))
    behavior = st.sidebar.selectbox(
        "Collision behavior",
        options=[b.value for b in CollisionBehavior],
        index=[b.value for b in CollisionBehavior].index(sec.get("collision_behavior", "back_away")),
    )

    # Sidebar: obstacles
    st.sidebar.header("Obstacles")
    count = int(st.sidebar.slider("Random obstacles", 0, 200, 20))
    spread_m = float(st.sidebar.slider("Spread [m]", 0.5, 10.0, 4.0))
    seed = int(st.sidebar.number_input("Seed", value=42, step=1))
    every = int(st.sidebar.slider("Draw every n-th path", 1, 20, 4))

    save_btn = st.sidebar.button("Save results to outputs/")
    dump_btn = st.sidebar.button("Debug dump paths")

    gen = _build_generator(family, num_paths, ref_distance, robot_radius, max_curvature, behavior)
    obstacles = _random_obstacles(count, spread_m, seed)
    tp_obstacles = gen.compute_free_distances(obstacles)

    col1, col2 = st.columns([2, 1])
    with col1:
        fig, ax = plt.subplots()
        plot_path_family(ax, gen, every=every, tp_obstacles=tp_obstacles)
        plot_obstacles(ax, obstacles)
        ax.set_title("Paths cut at their free distance")
        st.pyplot(fig, clear_figure=True)

    with col2:
        fig2, ax2 = plt.subplots()
        plot_tp_obstacles(ax2, gen, tp_obstacles)
        ax2.set_title("TP-Space obstacles")
        st.pyplot(fig2, clear_figure=True)

        best_k = int(np.argmax(tp_obstacles))
        st.metric("Freest path", f"k={best_k}", f"{tp_obstacles[best_k]:.2f} m")

    st.subheader("Free distance per path")
    df = pd.DataFrame(
        {
            "k": np.arange(gen.path_count),
            "alpha_rad": [gen.index_to_alpha(k) for k in range(gen.path_count)],
            "free_distance_m": tp_obstacles,
        }
    )
    st.dataframe(df, use_container_width=True)

    if save_btn:
        paths = make_run_paths()
        export_tp_obstacles_csv(paths, gen, tp_obstacles)
        export_obstacles_csv(paths, obstacles)
        st.success(f"Saved to: {paths.run_dir}")

    if dump_btn:
        if debug_dump_in_files(gen):
            st.success(f"Debug dump written under: {gen.settings.debug_output_dir}")
        else:
            st.warning("Debug dump failed; see log.")


if __name__ == "__main__":
    main()
