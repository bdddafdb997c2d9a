from __future__ import annotations

import argparse
import logging
from pathlib import Path

import matplotlib.pyplot as plt

from ptg_nav.core.generator import TrajectoryGenerator
from ptg_nav.io.config_loader import load_yaml_config
from ptg_nav.io.exporters import debug_dump_in_files
from ptg_nav.viz.render import plot_path_family


def main():
    parser = argparse.ArgumentParser(description="Write PTG debug files and a path plot.")
    parser.add_argument("--config", default="configs/default.yaml")
    parser.add_argument("--section", default="ptg_arc")
    parser.add_argument("--out", default=None, help="Output dir (default: debug_output_dir from config)")
    parser.add_argument("--every", type=int, default=4, help="Plot every n-th path")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = load_yaml_config(Path(args.config))
    gen = TrajectoryGenerator.from_config(cfg, args.section)
    gen.initialize(verbose=True)

    if not debug_dump_in_files(gen, base_dir=args.out):
        raise SystemExit(1)

    out_dir = Path(args.out if args.out is not None else gen.settings.debug_output_dir)
    fig, ax = plt.subplots()
    plot_path_family(ax, gen, every=args.every)
    ax.set_title(f"PTG {gen.name}: {gen.path_count} paths")
    fig.savefig(out_dir / "PTGs" / f"PTG{gen.name}.png", dpi=150)
    plt.close(fig)


if __name__ == "__main__":
    main()
