from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class DebugDumpPaths:
    ptg_dir: Path
    x_txt: Path
    y_txt: Path
    phi_txt: Path
    d_txt: Path


@dataclass(frozen=True)
class RunPaths:
    run_dir: Path
    tp_obstacles_csv: Path
    obstacles_csv: Path


def make_debug_paths(base_dir: str | Path, ptg_name: str) -> DebugDumpPaths:
    """
    Layout of a PTG debug dump, e.g. reactivenav.logs/PTGs/PTGarc_x.txt
    Directories are created.
    """
    ptg_dir = Path(base_dir) / "PTGs"
    ptg_dir.mkdir(parents=True, exist_ok=True)
    return DebugDumpPaths(
        ptg_dir=ptg_dir,
        x_txt=ptg_dir / f"PTG{ptg_name}_x.txt",
        y_txt=ptg_dir / f"PTG{ptg_name}_y.txt",
        phi_txt=ptg_dir / f"PTG{ptg_name}_phi.txt",
        d_txt=ptg_dir / f"PTG{ptg_name}_d.txt",
    )


def make_run_paths(base_dir: str | Path = "outputs/runs") -> RunPaths:
    """
    Create a timestamped run directory, e.g. outputs/runs/2026-01-16_01-23-45
    """
    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir = Path(base_dir) / ts
    run_dir.mkdir(parents=True, exist_ok=False)

    return RunPaths(
        run_dir=run_dir,
        tp_obstacles_csv=run_dir / "tp_obstacles.csv",
        obstacles_csv=run_dir / "obstacles.csv",
    )
